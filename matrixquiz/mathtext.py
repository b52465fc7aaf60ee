"""
Math markup handling for question text.

Text fields mark math with ``$...$`` (inline) and ``$$...$$`` (block).
``segment_math`` only splits on those markers; turning a formula into
MathML is the job of ``MathRenderer``, which wraps the ``latex2mathml``
converter and falls back to the literal source when a formula cannot be
converted.

Usage:
    from matrixquiz.mathtext import MathRenderer, segment_math

    for frag in segment_math("Solve $x^2=4$ for $x$."):
        print(frag.kind, frag.content)
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from latex2mathml.converter import convert as latex_to_mathml
from markupsafe import Markup, escape

logger = logging.getLogger(__name__)

PLAIN = "plain"
INLINE = "inline"
BLOCK = "block"

MATHML_NS = "http://www.w3.org/1998/Math/MathML"

# Block markers come first in the alternation so ``$$a$$`` is never read as
# an empty inline segment followed by stray dollars.
_MATH_PATTERN = re.compile(r"\$\$([\s\S]+?)\$\$|\$([\s\S]+?)\$")
_MATH_ELEMENT = re.compile(r"<math[\s\S]*?</math>")
_ANNOTATION = re.compile(r"<annotation(?:-xml)?\b[\s\S]*?</annotation(?:-xml)?>")
_SEMANTICS = re.compile(r"</?semantics[^>]*>")


@dataclass(frozen=True)
class MathFragment:
    kind: str
    content: str
    raw: str

    @property
    def is_math(self) -> bool:
        return self.kind != PLAIN


def segment_math(text: Optional[str]) -> List[MathFragment]:
    """Split ``text`` into plain / inline / block fragments.

    Plain text, whitespace included, is kept exactly; concatenating the
    ``raw`` of every fragment gives back the input. Nothing is evaluated.
    """
    if not text:
        return []
    fragments = []
    last_end = 0
    for match in _MATH_PATTERN.finditer(text):
        start, end = match.span()
        if start > last_end:
            plain = text[last_end:start]
            fragments.append(MathFragment(PLAIN, plain, plain))
        if match.group(1) is not None:
            fragments.append(MathFragment(BLOCK, match.group(1), match.group(0)))
        else:
            fragments.append(MathFragment(INLINE, match.group(2), match.group(0)))
        last_end = end
    if last_end < len(text):
        tail = text[last_end:]
        fragments.append(MathFragment(PLAIN, tail, tail))
    return fragments


def has_math(text: Optional[str]) -> bool:
    return any(f.is_math for f in segment_math(text))


def strip_annotations(mathml: str) -> str:
    """Keep only the ``<math>`` element, without annotation or semantics wrappers.

    Adds the MathML namespace when the converter left it out, since Word
    ignores un-namespaced math.
    """
    found = _MATH_ELEMENT.search(mathml)
    clean = found.group(0) if found else mathml
    clean = _ANNOTATION.sub("", clean)
    clean = _SEMANTICS.sub("", clean)
    if "xmlns=" not in clean:
        clean = clean.replace("<math", f'<math xmlns="{MATHML_NS}"', 1)
    return clean


class MathRenderer:
    """Render math fragments for the browser preview or for Word output.

    Args:
        converter: ``callable(latex, display=...) -> str`` producing MathML.
            Defaults to ``latex2mathml``.
    """

    def __init__(self, converter: Optional[Callable[..., str]] = None):
        self.converter = converter or latex_to_mathml

    def _convert(self, fragment: MathFragment) -> Optional[str]:
        display = "block" if fragment.kind == BLOCK else "inline"
        try:
            return self.converter(fragment.content.strip(), display=display)
        except Exception as e:
            logger.warning("Could not render math %r: %s", fragment.raw, e)
            return None

    def display_markup(self, fragment: MathFragment) -> Markup:
        """HTML for the interactive preview."""
        if not fragment.is_math:
            return escape(fragment.content)
        mathml = self._convert(fragment)
        if mathml is None:
            return escape(fragment.raw)
        if fragment.kind == BLOCK:
            return Markup('<div class="math-block">{}</div>').format(Markup(mathml))
        return Markup('<span class="math-inline">{}</span>').format(Markup(mathml))

    def word_markup(self, fragment: MathFragment) -> Markup:
        """Namespaced, annotation-free MathML for Word-compatible HTML."""
        if not fragment.is_math:
            return Markup("<br>").join(escape(line) for line in fragment.content.split("\n"))
        mathml = self._convert(fragment)
        if mathml is None:
            return escape(fragment.raw)
        clean = Markup(strip_annotations(mathml))
        if fragment.kind == BLOCK:
            return Markup('<div align="center" style="margin: 15pt 0;">{}</div>').format(clean)
        return Markup("<span>{} </span>").format(clean)

    def render_text(self, text: Optional[str], mode: str = "display") -> Markup:
        """Render a whole text field; ``mode`` is ``"display"`` or ``"word"``."""
        render = self.word_markup if mode == "word" else self.display_markup
        return Markup("").join(render(f) for f in segment_math(text))
