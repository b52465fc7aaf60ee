"""
Shared helpers for the MatrixQuiz exporters.

Provides file naming and cell sanitizing used by word_export.py,
docx_export.py, latex_export.py and csv_export.py.
"""

import re

# Characters most filesystems refuse in a file name.
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:"*?<>|]')

DOC_MIMETYPE = "application/msword"
DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEX_MIMETYPE = "application/x-tex"
CSV_MIMETYPE = "text/csv"

UTF8_BOM = "\ufeff"


def sanitize_csv_cell(value):
    """Prevent CSV formula injection by escaping dangerous prefixes.

    Spreadsheet applications can interpret cells starting with =, +, -, @,
    tab, or carriage return as formulas. Such cells get a leading single
    quote. Non-string values are returned as-is.
    """
    if not isinstance(value, str):
        return value
    if value and value[0] in ("=", "+", "-", "@", "\t", "\r"):
        return "'" + value
    return value


def safe_file_name_part(text: str) -> str:
    """Turn a human-entered title into a file name fragment.

    Whitespace runs become a single underscore; characters that are unsafe
    in file names are dropped. Everything else, accents included, is kept.
    """
    clean = re.sub(r"\s+", "_", (text or "").strip())
    return _UNSAFE_FILENAME_CHARS.sub("", clean)


def exam_filename(header, extension: str) -> str:
    """``Exam_<title>_Grade_<grade>_Code_<code>.<ext>``"""
    return (
        f"Exam_{safe_file_name_part(header.title)}"
        f"_Grade_{safe_file_name_part(header.grade)}"
        f"_Code_{safe_file_name_part(header.exam_code)}.{extension}"
    )


def matrix_filename(header, extension: str) -> str:
    return f"Matrix_{safe_file_name_part(header.title)}.{extension}"


def specification_filename(header, extension: str) -> str:
    return f"Specification_{safe_file_name_part(header.title)}.{extension}"
