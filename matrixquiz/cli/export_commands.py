"""
Export CLI commands.
"""

import os

from matrixquiz.cli import load_document
from matrixquiz.errors import ValidationError
from matrixquiz.exports import EXPORT_FORMATS, build_export
from matrixquiz.figures import FigureBoard
from matrixquiz.word_export import DEFAULT_FIGURE_WIDTH


def register_export_commands(subparsers):
    """Register export subcommands."""

    # export
    p = subparsers.add_parser("export", help="Export an exam document to file.")
    p.add_argument("file", help="Exam document (YAML or JSON).")
    p.add_argument("--format", dest="fmt", required=True, choices=EXPORT_FORMATS, help="Export format.")
    p.add_argument("--output", type=str, help="Output file path or directory.")
    p.add_argument(
        "--draw-figures",
        action="store_true",
        help="Draw every question's figure first so it is included in the export.",
    )


def handle_export(config, args):
    """Export one artifact from an exam document."""
    doc = load_document(config, args.file)

    figures = None
    if args.draw_figures:
        fig_cfg = config.get("figures", {})
        figures = FigureBoard(fig_cfg.get("width", 500), fig_cfg.get("height", 300))
        for q in doc.questions:
            if q.has_drawing:
                figures.display(q.id, q.drawing)

    try:
        artifact = build_export(
            doc,
            args.fmt,
            figures=figures,
            figure_width=config.get("export", {}).get("figure_width", DEFAULT_FIGURE_WIDTH),
        )
    except ValidationError as e:
        print(f"Error: {e}")
        return 1

    out_path = args.output or artifact.filename
    if os.path.isdir(out_path):
        out_path = os.path.join(out_path, artifact.filename)
    with open(out_path, "wb") as f:
        f.write(artifact.content)
    print(f"[OK] Exported to {out_path}")
    return 0
