"""
Figure programs: a small line-oriented drawing language for question figures.

The generation service attaches a program like::

    // right triangle ABC
    stroke #1f2937
    width 2
    polygon 60 240 260 240 60 60
    point 60 240 A
    point 260 240 B
    point 60 60 C
    text 150 250 6 cm

to a question. On screen the program is drawn onto a fixed-size canvas; for
exports, which cannot run programs, the ``FigureBoard`` keeps a PNG snapshot
of every canvas that has been displayed. A figure that was never displayed
has no snapshot and is left out of exported documents.
"""

import base64
import io
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from matrixquiz.errors import DrawError

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 500
CANVAS_HEIGHT = 300
BACKGROUND = (255, 255, 255)
PLACEHOLDER_TEXT = "Unable to draw figure"

# command -> (minimum numeric args, maximum numeric args or None, takes trailing text)
COMMANDS = {
    "stroke": (0, 0, True),
    "fill": (0, 0, True),
    "width": (1, 1, False),
    "font": (1, 1, False),
    "line": (4, 4, False),
    "polyline": (4, None, False),
    "polygon": (6, None, False),
    "rect": (4, 4, False),
    "circle": (3, 3, False),
    "ellipse": (4, 4, False),
    "arc": (5, 5, False),
    "point": (2, 2, True),
    "text": (2, 2, True),
}


@dataclass(frozen=True)
class Instruction:
    command: str
    numbers: Tuple[float, ...]
    text: str
    line_number: int


@dataclass(frozen=True)
class FigureProgram:
    source: str
    instructions: Tuple[Instruction, ...]


@dataclass(frozen=True)
class RasterSnapshot:
    png: bytes
    width: int
    height: int

    @property
    def data_uri(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.png).decode("ascii")

    def as_stream(self) -> io.BytesIO:
        return io.BytesIO(self.png)


def _parse_color(value: str, line_number: int):
    try:
        return ImageColor.getrgb(value)
    except ValueError:
        raise DrawError(f"invalid colour {value!r}", line_number)


def _parse_line(line: str, line_number: int) -> Instruction:
    parts = line.split()
    command = parts[0].lower()
    if command not in COMMANDS:
        raise DrawError(f"unknown command {parts[0]!r}", line_number)
    min_args, max_args, takes_text = COMMANDS[command]

    numbers: List[float] = []
    rest = parts[1:]
    while rest and (max_args is None or len(numbers) < max_args):
        try:
            numbers.append(float(rest[0]))
        except ValueError:
            break
        rest = rest[1:]

    if len(numbers) < min_args:
        raise DrawError(f"{command} needs at least {min_args} numbers, got {len(numbers)}", line_number)
    if rest and not takes_text:
        raise DrawError(f"{command} got unexpected argument {rest[0]!r}", line_number)
    if command in ("polyline", "polygon") and len(numbers) % 2:
        raise DrawError(f"{command} needs x y pairs", line_number)

    text = " ".join(rest).strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1]

    if command in ("stroke", "fill"):
        if not text:
            raise DrawError(f"{command} needs a colour", line_number)
        if not (command == "fill" and text.lower() == "none"):
            _parse_color(text, line_number)
    if command in ("width", "font") and numbers[0] <= 0:
        raise DrawError(f"{command} must be positive", line_number)
    if command == "circle" and numbers[2] < 0:
        raise DrawError("circle radius must not be negative", line_number)
    if command == "arc" and numbers[2] < 0:
        raise DrawError("arc radius must not be negative", line_number)
    if command in ("rect", "ellipse") and (numbers[2] < 0 or numbers[3] < 0):
        raise DrawError(f"{command} size must not be negative", line_number)

    return Instruction(command, tuple(numbers), text, line_number)


def parse_program(source: str) -> FigureProgram:
    """Parse a figure program.

    Blank lines and lines starting with ``//`` are ignored.

    Raises:
        DrawError: on an unknown command, wrong argument count, a
            non-numeric coordinate, or a bad colour.
    """
    instructions = []
    for line_number, raw in enumerate((source or "").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("//"):
            continue
        instructions.append(_parse_line(line, line_number))
    return FigureProgram(source=source or "", instructions=tuple(instructions))


def _load_font(size):
    try:
        return ImageFont.truetype("DejaVuSans.ttf", int(size))
    except OSError:
        return ImageFont.load_default()


class Surface:
    """A fixed-size RGB canvas plus the current pen state."""

    def __init__(self, width=CANVAS_WIDTH, height=CANVAS_HEIGHT):
        self.width = width
        self.height = height
        self.image = Image.new("RGB", (width, height), color=BACKGROUND)
        self.draw = ImageDraw.Draw(self.image)
        self.stroke = (0, 0, 0)
        self.fill = None
        self.line_width = 1
        self.font = _load_font(14)

    def clear(self):
        self.draw.rectangle([0, 0, self.width, self.height], fill=BACKGROUND)

    def snapshot(self) -> RasterSnapshot:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return RasterSnapshot(png=buf.getvalue(), width=self.width, height=self.height)


def _points(numbers):
    return [(numbers[i], numbers[i + 1]) for i in range(0, len(numbers), 2)]


def _execute(ins: Instruction, s: Surface):
    n = ins.numbers
    width = max(1, int(round(s.line_width)))
    if ins.command == "stroke":
        s.stroke = ImageColor.getrgb(ins.text)
    elif ins.command == "fill":
        s.fill = None if ins.text.lower() == "none" else ImageColor.getrgb(ins.text)
    elif ins.command == "width":
        s.line_width = n[0]
    elif ins.command == "font":
        s.font = _load_font(n[0])
    elif ins.command == "line":
        s.draw.line(_points(n), fill=s.stroke, width=width)
    elif ins.command == "polyline":
        s.draw.line(_points(n), fill=s.stroke, width=width, joint="curve")
    elif ins.command == "polygon":
        pts = _points(n)
        if s.fill is not None:
            s.draw.polygon(pts, fill=s.fill)
        s.draw.line(pts + [pts[0]], fill=s.stroke, width=width, joint="curve")
    elif ins.command == "rect":
        x, y, w, h = n
        s.draw.rectangle([x, y, x + w, y + h], outline=s.stroke, fill=s.fill, width=width)
    elif ins.command == "circle":
        cx, cy, r = n
        s.draw.ellipse([cx - r, cy - r, cx + r, cy + r], outline=s.stroke, fill=s.fill, width=width)
    elif ins.command == "ellipse":
        cx, cy, rx, ry = n
        s.draw.ellipse([cx - rx, cy - ry, cx + rx, cy + ry], outline=s.stroke, fill=s.fill, width=width)
    elif ins.command == "arc":
        cx, cy, r, start, end = n
        s.draw.arc([cx - r, cy - r, cx + r, cy + r], start=start, end=end, fill=s.stroke, width=width)
    elif ins.command == "point":
        x, y = n
        s.draw.ellipse([x - 3, y - 3, x + 3, y + 3], fill=s.stroke)
        if ins.text:
            s.draw.text((x + 6, y - 18), ins.text, fill=s.stroke, font=s.font)
    elif ins.command == "text":
        s.draw.text((n[0], n[1]), ins.text, fill=s.stroke, font=s.font)


def render(program: FigureProgram, surface: Surface) -> RasterSnapshot:
    """Draw ``program`` on ``surface`` and return a PNG snapshot.

    Raises:
        DrawError: if an instruction cannot be drawn.
    """
    surface.clear()
    for ins in program.instructions:
        try:
            _execute(ins, surface)
        except (ValueError, TypeError) as e:
            raise DrawError(f"{ins.command} failed: {e}", ins.line_number) from e
    return surface.snapshot()


def placeholder_snapshot(width=CANVAS_WIDTH, height=CANVAS_HEIGHT) -> RasterSnapshot:
    surface = Surface(width, height)
    surface.font = _load_font(12)
    surface.draw.text((10, 10), PLACEHOLDER_TEXT, fill=(220, 38, 38), font=surface.font)
    return surface.snapshot()


class FigureBoard:
    """Per-session record of the figures that have been drawn.

    ``display`` draws a question's program and keeps the resulting
    snapshot; exporters call ``snapshot`` and get ``None`` for any question
    whose figure was never displayed.
    """

    def __init__(self, width=CANVAS_WIDTH, height=CANVAS_HEIGHT):
        self.width = width
        self.height = height
        self._snapshots: Dict[str, RasterSnapshot] = {}

    def display(self, question_id: str, source: Optional[str]) -> Optional[RasterSnapshot]:
        """Draw a figure for on-screen display and remember the result.

        A malformed program shows a red placeholder instead of failing.
        """
        if not source or not source.strip():
            return None
        surface = Surface(self.width, self.height)
        try:
            snap = render(parse_program(source), surface)
        except DrawError as e:
            logger.warning("Figure for question %s could not be drawn: %s", question_id, e)
            snap = placeholder_snapshot(self.width, self.height)
        self._snapshots[question_id] = snap
        return snap

    def snapshot(self, question_id: str) -> Optional[RasterSnapshot]:
        snap = self._snapshots.get(question_id)
        if snap is None:
            logger.debug("No figure snapshot for question %s; omitting image", question_id)
        return snap

    def forget(self, question_id: str):
        self._snapshots.pop(question_id, None)

    def __contains__(self, question_id):
        return question_id in self._snapshots

    def __len__(self):
        return len(self._snapshots)


DEFAULT_MAX_BOARDS = 200


class FigureBoardStore:
    """Figure boards keyed by browser session, least recently used first out.

    Holds at most ``max_boards`` boards; creating one more evicts the board
    that has gone longest without being used.
    """

    def __init__(self, max_boards=DEFAULT_MAX_BOARDS, width=CANVAS_WIDTH, height=CANVAS_HEIGHT):
        if max_boards < 1:
            raise ValueError("max_boards must be at least 1")
        self.max_boards = max_boards
        self.width = width
        self.height = height
        self._boards: "OrderedDict[str, FigureBoard]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, board_id: str) -> FigureBoard:
        """The board for ``board_id``, created on first use."""
        with self._lock:
            board = self._boards.get(board_id)
            if board is not None:
                self._boards.move_to_end(board_id)
                return board
            board = FigureBoard(self.width, self.height)
            self._boards[board_id] = board
            while len(self._boards) > self.max_boards:
                evicted, _ = self._boards.popitem(last=False)
                logger.debug("Evicted figure board %s", evicted)
            return board

    def discard(self, board_id: str):
        with self._lock:
            self._boards.pop(board_id, None)

    def __contains__(self, board_id):
        with self._lock:
            return board_id in self._boards

    def __len__(self):
        with self._lock:
            return len(self._boards)

    def boards(self) -> List[FigureBoard]:
        with self._lock:
            return list(self._boards.values())
