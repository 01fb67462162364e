import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from .errors import EncodeError, InputError


@dataclass
class StickerResult:
    primary: Path
    alternate: Path
    primary_bytes: bytes
    alternate_bytes: bytes


class WebpEncoder:
    """
    Alternate-format collaborator: re-encodes PNG bytes as lossless WEBP.
    """

    extension = ".webp"

    def __init__(self, quality: int = 100, method: int = 6) -> None:
        self.quality = quality
        self.method = method

    def encode(self, png_bytes: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(png_bytes)) as img:
                img.load()
                buf = io.BytesIO()
                img.convert("RGBA").save(
                    buf,
                    format="WEBP",
                    lossless=True,
                    exact=True,
                    quality=self.quality,
                    method=self.method,
                )
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeError(f"WEBP re-encode failed: {exc}") from exc
        return buf.getvalue()


def encode_png(canvas: Image.Image) -> bytes:
    """
    Serialize the canvas to PNG. Pillow writes no timestamps, so identical
    pixels give identical bytes.
    """
    if canvas.width == 0 or canvas.height == 0:
        raise InputError(f"Cannot export an empty canvas: {canvas.size}")
    buf = io.BytesIO()
    try:
        canvas.convert("RGBA").save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"PNG encode failed: {exc}") from exc
    return buf.getvalue()


class StickerExporter:
    def __init__(self, alternate_encoder: Optional[WebpEncoder] = None) -> None:
        self.alternate_encoder = alternate_encoder or WebpEncoder()

    def encode(self, canvas: Image.Image) -> Tuple[bytes, bytes]:
        primary = encode_png(canvas)
        alternate = self.alternate_encoder.encode(primary)
        return primary, alternate

    def export(self, canvas: Image.Image, output_dir: Path, stem: str) -> StickerResult:
        """
        Encode both formats first and only then write them, so a failed
        re-encode never leaves a lone PNG behind.
        """
        primary_bytes, alternate_bytes = self.encode(canvas)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        primary_path = output_dir / f"{stem}.png"
        alternate_path = output_dir / f"{stem}{self.alternate_encoder.extension}"
        primary_path.write_bytes(primary_bytes)
        alternate_path.write_bytes(alternate_bytes)

        print(f"✅ Sticker saved to: {primary_path}")
        print(f"✅ Web sticker saved to: {alternate_path}")
        return StickerResult(
            primary=primary_path,
            alternate=alternate_path,
            primary_bytes=primary_bytes,
            alternate_bytes=alternate_bytes,
        )
