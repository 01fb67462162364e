from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .errors import RenderError


Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

FONT_SIZE = 38
LINE_SPACING = 4
BOTTOM_MARGIN = 20
SIDE_PADDING = 40

STROKE_WIDTH = 4
STROKE_COLOR: Tuple[int, int, int, int] = (0, 0, 0, 255)
FILL_COLOR: Tuple[int, int, int, int] = (255, 255, 255, 255)

BOLD_FONT_CANDIDATES = [
    # Linux
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    # macOS
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    # Windows
    "C:/Windows/Fonts/arialbd.ttf",
    "DejaVuSans-Bold.ttf",
    "arialbd.ttf",
]


@dataclass
class WrappedText:
    lines: List[str]
    baselines: List[int]
    x: int
    line_height: int


def load_font(font_path: Optional[str] = None, size: int = FONT_SIZE) -> Font:
    """
    Load a bold TrueType font for the caption.

    Tries, in order: an explicit `font_path`, any .ttf/.otf in the project's
    fonts/ folder, common system bold fonts, and finally Pillow's bundled
    scalable default. An explicit path that cannot be loaded is an error
    rather than a silent fallback.
    """
    if font_path:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError as exc:
            raise RenderError(f"Could not load font '{font_path}': {exc}") from exc

    candidates: List[str] = []
    fonts_dir = Path(__file__).parent.parent / "fonts"
    if fonts_dir.exists():
        candidates.extend(str(p) for p in sorted(fonts_dir.glob("*.ttf")))
        candidates.extend(str(p) for p in sorted(fonts_dir.glob("*.otf")))
    candidates.extend(BOLD_FONT_CANDIDATES)

    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue

    try:
        return ImageFont.load_default(size=size)
    except (OSError, TypeError) as exc:
        raise RenderError(f"No usable font found for size {size}: {exc}") from exc


def measure(draw: ImageDraw.ImageDraw, text: str, font: Font) -> float:
    try:
        return draw.textlength(text, font=font)
    except (OSError, ValueError) as exc:
        raise RenderError(f"Failed to measure text '{text}': {exc}") from exc


def wrap_caption(
    draw: ImageDraw.ImageDraw, text: str, font: Font, max_width: int
) -> List[str]:
    """
    Greedy word wrap. A word that would overflow starts a new line unless it
    is the first word of the line, in which case it stays there unbroken.
    An empty caption gives a single empty line.
    """
    words = text.split()
    lines: List[str] = []
    current = ""
    for word in words:
        test = f"{current} {word}" if current else word
        if measure(draw, test, font) > max_width and current:
            lines.append(current)
            current = word
        else:
            current = test
    lines.append(current)
    return lines


def layout_caption(
    draw: ImageDraw.ImageDraw,
    text: str,
    font: Font,
    canvas_size: Tuple[int, int],
    font_size: int = FONT_SIZE,
    max_width: Optional[int] = None,
) -> WrappedText:
    """
    Wrap the caption and stack the lines so the block sits just above the
    bottom margin, each line centred on the canvas midline.
    """
    width, height = canvas_size
    if max_width is None:
        max_width = width - SIDE_PADDING

    lines = wrap_caption(draw, text, font, max_width)
    line_height = font_size + LINE_SPACING
    top = height - len(lines) * line_height - BOTTOM_MARGIN
    baselines = [top + i * line_height for i in range(len(lines))]
    return WrappedText(lines=lines, baselines=baselines, x=width // 2, line_height=line_height)


def draw_caption(
    img: Image.Image,
    text: str,
    font_path: Optional[str] = None,
    font_size: int = FONT_SIZE,
    max_width: Optional[int] = None,
) -> WrappedText:
    """
    Render the caption in place: a black stroke pass first, then the white
    fill on top, so the outline sits entirely behind the letters.
    """
    font = load_font(font_path, size=font_size)
    draw = ImageDraw.Draw(img)
    wrapped = layout_caption(
        draw, text, font, img.size, font_size=font_size, max_width=max_width
    )

    # Pillow strokes outward from the glyph edge, a line of STROKE_WIDTH
    # centred on the edge only shows half of it outside the fill.
    outward = STROKE_WIDTH // 2
    try:
        for line, y in zip(wrapped.lines, wrapped.baselines):
            if not line:
                continue
            draw.text(
                (wrapped.x, y),
                line,
                font=font,
                fill=STROKE_COLOR,
                anchor="mm",
                stroke_width=outward,
                stroke_fill=STROKE_COLOR,
            )
            draw.text((wrapped.x, y), line, font=font, fill=FILL_COLOR, anchor="mm")
    except (OSError, ValueError) as exc:
        raise RenderError(f"Failed to render caption '{text}': {exc}") from exc

    return wrapped
