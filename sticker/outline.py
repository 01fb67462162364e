from typing import Optional, Tuple

from PIL import Image, ImageFilter

from .errors import InputError


CANVAS_SIZE = 512
OUTLINE_RADIUS = 10

MASK_COLOR = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)

DILATION_METHODS = ("stamp", "maxfilter")


def fit_to_canvas(img: Image.Image, size: int = CANVAS_SIZE) -> Image.Image:
    """
    Scale the cutout to fit inside a square canvas while preserving its
    aspect ratio, and centre it on a transparent background.
    """
    if img.width == 0 or img.height == 0:
        raise InputError(f"Cutout has zero size: {img.size}")

    img = img.convert("RGBA")
    if img.size == (size, size):
        return img.copy()

    scale = min(size / img.width, size / img.height)
    width = max(1, round(img.width * scale))
    height = max(1, round(img.height * scale))
    resized = img.resize((width, height), Image.LANCZOS)

    canvas = Image.new("RGBA", (size, size), TRANSPARENT)
    x = (size - width) // 2
    y = (size - height) // 2
    canvas.paste(resized, (x, y))
    return canvas


def extract_mask(img: Image.Image, size: Optional[Tuple[int, int]] = None) -> Image.Image:
    """
    Binary foreground mask: every pixel with non-zero alpha becomes opaque
    white, everything else stays fully transparent.
    """
    _check_size(img, size)

    alpha = img.convert("RGBA").getchannel("A")
    binary = alpha.point(lambda a: 255 if a > 0 else 0)

    mask = Image.new("RGBA", img.size, TRANSPARENT)
    mask.paste(Image.new("RGBA", img.size, MASK_COLOR), (0, 0), binary)
    return mask


def dilate_mask(
    mask: Image.Image,
    radius: int = OUTLINE_RADIUS,
    method: str = "stamp",
) -> Image.Image:
    """
    Grow the opaque region of a mask by `radius` pixels using a square
    structuring element, so that every pixel within Chebyshev distance
    `radius` of the silhouette becomes opaque.

    `stamp` composites the mask at every offset in [-radius, radius]^2;
    `maxfilter` runs a (2 * radius + 1) max filter over the alpha channel.
    Both give the same result.
    """
    if radius < 0:
        raise InputError(f"Outline radius must be non-negative, got {radius}")
    if method not in DILATION_METHODS:
        raise InputError(f"Unknown dilation method '{method}'")
    _check_size(mask, None)

    mask = mask.convert("RGBA")
    if radius == 0:
        return mask.copy()

    if method == "maxfilter":
        return _dilate_maxfilter(mask, radius)
    return _dilate_stamp(mask, radius)


def _dilate_stamp(mask: Image.Image, radius: int) -> Image.Image:
    canvas = Image.new("RGBA", mask.size, TRANSPARENT)
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            # alpha_composite only takes non-negative offsets, so negative
            # shifts crop the source instead; overflow past the edge is clipped.
            dest = (max(dx, 0), max(dy, 0))
            source = (max(-dx, 0), max(-dy, 0))
            canvas.alpha_composite(mask, dest=dest, source=source)
    return canvas


def _dilate_maxfilter(mask: Image.Image, radius: int) -> Image.Image:
    alpha = mask.getchannel("A").filter(ImageFilter.MaxFilter(2 * radius + 1))
    binary = alpha.point(lambda a: 255 if a > 0 else 0)

    out = Image.new("RGBA", mask.size, TRANSPARENT)
    out.paste(Image.new("RGBA", mask.size, MASK_COLOR), (0, 0), binary)
    return out


def compose_outline(silhouette: Image.Image, cutout: Image.Image) -> Image.Image:
    """
    Layer the dilated silhouette beneath the cutout. The silhouette only
    stays visible where the subject does not cover it, forming the outline.
    """
    if silhouette.size != cutout.size:
        raise InputError(
            f"Silhouette {silhouette.size} and cutout {cutout.size} differ in size"
        )
    _check_size(cutout, None)

    canvas = Image.new("RGBA", cutout.size, TRANSPARENT)
    canvas.alpha_composite(silhouette.convert("RGBA"))
    canvas.alpha_composite(cutout.convert("RGBA"))
    return canvas


def _check_size(img: Image.Image, size: Optional[Tuple[int, int]]) -> None:
    if img.width == 0 or img.height == 0:
        raise InputError(f"Image has zero size: {img.size}")
    if size is not None and img.size != tuple(size):
        raise InputError(f"Expected image of size {tuple(size)}, got {img.size}")
