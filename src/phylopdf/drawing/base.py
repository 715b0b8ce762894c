import logging
import math
import sys
from pathlib import Path

import drawsvg as draw

from ..color import Color
from ..errors import InputOutputError, SurfaceInitError
from ..geometry import Location, Size

logger = logging.getLogger(__name__)

FONT_FAMILY = "Helvetica"

# No font metrics are available before rendering, so text is measured with
# an average glyph advance and cap height relative to the font size.
TEXT_WIDTH_RATIO = 0.6
TEXT_HEIGHT_RATIO = 0.72

ARROW_WIDTH_TO_LENGTH_RATIO = 2.0

DEFAULT_CANVAS_SIZE = Size(72 * 8.5, 72 * 11.0)


class Surface:
    """Vector drawing surface producing a single page PDF.

    Coordinates are in points with the origin at the top-left corner and y
    growing downwards. Use as a context manager: the PDF is written when the
    block exits normally. If it raises, an existing file is left untouched and
    a file created by the surface is removed.
    """

    def __init__(self, filename, canvas_size: Size = DEFAULT_CANVAS_SIZE, font_family: str = FONT_FAMILY):
        if not (canvas_size.width > 0 and canvas_size.height > 0) or math.isinf(canvas_size.width) or math.isinf(canvas_size.height):
            raise SurfaceInitError(f"cannot create pdf surface of size {canvas_size.width}x{canvas_size.height}")
        self.filename = str(filename)
        self._created = False
        if self.filename != "-":
            # check the path is writable without truncating an existing file
            self._created = not Path(self.filename).exists()
            try:
                with open(self.filename, "ab"):
                    pass
            except OSError as err:
                raise SurfaceInitError(f"cannot create pdf surface {self.filename}: {err}") from err
        self.canvas_size = canvas_size
        self.font_family = font_family
        self.d = draw.Drawing(canvas_size.width, canvas_size.height)
        self.d.append(draw.Rectangle(0, 0, canvas_size.width, canvas_size.height, fill="white"))
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self._closed = True
            if self._created:
                Path(self.filename).unlink(missing_ok=True)
        return False

    # ------------------------------------------------------------------

    def line(self, a: Location, b: Location, color: Color, width: float, line_cap: str = "butt") -> None:
        self.d.append(draw.Line(
            a.x, a.y, b.x, b.y,
            stroke=color.to_hex(),
            stroke_opacity=color.alpha,
            stroke_width=width,
            stroke_linecap=line_cap,
        ))

    def double_arrow(self, a: Location, b: Location, color: Color, line_width: float, arrow_width: float) -> None:
        x_eq = abs(b.x - a.x) < 1e-10
        if x_eq:
            sign2 = 1.0 if a.y < b.y else -1.0
            angle = -math.pi / 2
        else:
            sign2 = 1.0 if b.x < a.x else -1.0
            angle = math.atan((b.y - a.y) / (b.x - a.x))

        la = self._arrow_head(a, angle, -sign2, color, arrow_width)
        lb = self._arrow_head(b, angle, sign2, color, arrow_width)
        self.line(la, lb, color, line_width)

    def _arrow_head(self, a: Location, angle: float, sign: float, color: Color, arrow_width: float) -> Location:
        """Filled triangle with its tip at ``a``; returns the middle of its base."""
        arrow_length = arrow_width * ARROW_WIDTH_TO_LENGTH_RATIO
        b = Location(a.x + sign * arrow_length * math.cos(angle), a.y + sign * arrow_length * math.sin(angle))
        c = Location(b.x + sign * arrow_width * math.cos(angle + math.pi / 2) * 0.5,
                     b.y + sign * arrow_width * math.sin(angle + math.pi / 2) * 0.5)
        d = Location(b.x + sign * arrow_width * math.cos(angle - math.pi / 2) * 0.5,
                     b.y + sign * arrow_width * math.sin(angle - math.pi / 2) * 0.5)

        path = draw.Path(fill=color.to_hex(), fill_opacity=color.alpha, stroke="none")
        path.M(a.x, a.y).L(c.x, c.y).L(d.x, d.y).Z()
        self.d.append(path)
        return b

    def text(self, a: Location, text: str, color: Color, size: float, rotation: float = 0.0) -> None:
        """Draw ``text`` with its baseline starting at ``a``; ``rotation`` in radians, clockwise."""
        kwargs = {}
        if rotation:
            kwargs["transform"] = f"rotate({math.degrees(rotation)},{a.x},{a.y})"
        self.d.append(draw.Text(
            text,
            size,
            a.x,
            a.y,
            fill=color.to_hex(),
            fill_opacity=color.alpha,
            font_family=self.font_family,
            **kwargs,
        ))

    def text_size(self, text: str, size: float) -> Size:
        """Advance width and height above the baseline of ``text``."""
        return Size(TEXT_WIDTH_RATIO * size * len(text), TEXT_HEIGHT_RATIO * size)

    def text_x_bearing(self, text: str, size: float) -> float:
        return 0.0

    # ------------------------------------------------------------------

    def as_svg(self) -> str:
        return self.d.as_svg()

    def save_svg(self, outpath) -> None:
        outpath = Path(outpath)
        outpath.parent.mkdir(parents=True, exist_ok=True)
        self.d.save_svg(str(outpath))

    def close(self) -> None:
        """Render the drawing to PDF and release it."""
        if self._closed:
            return
        self._closed = True
        try:
            import cairosvg
        except ImportError as e:
            raise ImportError("PDF export requires cairosvg. Install with: pip install cairosvg") from e

        pdf = cairosvg.svg2pdf(bytestring=self.as_svg().encode("utf-8"))
        if self.filename == "-":
            sys.stdout.buffer.write(pdf)
            sys.stdout.buffer.flush()
        else:
            try:
                with open(self.filename, "wb") as out:
                    out.write(pdf)
            except OSError as err:
                raise InputOutputError(f"cannot write {self.filename}: {err}") from err
        logger.info("PDF written to %s", self.filename)
