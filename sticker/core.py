import io
import os
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .cutout import RemoveBgClient
from .errors import InputError
from .export import StickerExporter, StickerResult
from .generator import (
    GeneratorChain,
    HuggingFaceImageGenerator,
    OpenAIImageGenerator,
    ReplicateImageGenerator,
)
from .outline import (
    CANVAS_SIZE,
    OUTLINE_RADIUS,
    compose_outline,
    dilate_mask,
    extract_mask,
    fit_to_canvas,
)
from .render import FONT_SIZE, draw_caption


SourceImage = Union[str, Path, bytes]


@dataclass
class StickerConfig:
    removebg_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    replicate_api_token: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    output_dir: Path = Path("outputs")
    font_path: Optional[str] = None
    canvas_size: int = CANVAS_SIZE
    outline_radius: int = OUTLINE_RADIUS
    font_size: int = FONT_SIZE
    dilation_method: str = "stamp"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StickerConfig":
        """
        Build a config from environment variables. Only the CLI calls this;
        the pipeline itself never looks at the environment.
        """
        env = os.environ if environ is None else environ
        return cls(
            removebg_api_key=env.get("REMOVEBG_API_KEY"),
            openai_api_key=env.get("OPENAI_API_KEY"),
            replicate_api_token=env.get("REPLICATE_API_TOKEN"),
            huggingface_api_key=env.get("HUGGINGFACE_API_KEY"),
            output_dir=Path(env.get("STICKER_OUTPUT_DIR") or "outputs"),
            font_path=env.get("STICKER_FONT_PATH") or None,
        )


def build_sticker(
    cutout: Image.Image,
    caption: str,
    canvas_size: int = CANVAS_SIZE,
    radius: int = OUTLINE_RADIUS,
    font_path: Optional[str] = None,
    font_size: int = FONT_SIZE,
    dilation_method: str = "stamp",
) -> Image.Image:
    """
    Turn a cutout into a finished sticker canvas: outline ring around the
    subject plus the wrapped caption near the bottom.
    """
    subject = fit_to_canvas(cutout, canvas_size)
    mask = extract_mask(subject, (canvas_size, canvas_size))
    silhouette = dilate_mask(mask, radius, method=dilation_method)
    canvas = compose_outline(silhouette, subject)
    draw_caption(canvas, caption, font_path=font_path, font_size=font_size)
    return canvas


class StickerPipeline:
    """
    Orchestrates the sticker pipeline:
    - (optionally) generate a source image from a prompt
    - remove its background
    - outline the subject and render the caption
    - export PNG + lossless WEBP under the configured output dir

    Any stage failure raises a StickerError subclass naming the stage; nothing
    is written unless every stage succeeded.
    """

    def __init__(
        self,
        config: StickerConfig,
        cutout_client: Optional[RemoveBgClient] = None,
        generators: Optional[Sequence] = None,
        exporter: Optional[StickerExporter] = None,
    ) -> None:
        self.config = config
        self.cutout_client = cutout_client or RemoveBgClient(config.removebg_api_key)
        if generators is None:
            generators = [
                OpenAIImageGenerator(config.openai_api_key),
                ReplicateImageGenerator(config.replicate_api_token),
                HuggingFaceImageGenerator(config.huggingface_api_key),
            ]
        self.generator_chain = GeneratorChain(generators)
        self.exporter = exporter or StickerExporter()

    def render(self, cutout: Image.Image, caption: str) -> Image.Image:
        return build_sticker(
            cutout,
            caption,
            canvas_size=self.config.canvas_size,
            radius=self.config.outline_radius,
            font_path=self.config.font_path,
            font_size=self.config.font_size,
            dilation_method=self.config.dilation_method,
        )

    def image_to_sticker(
        self,
        source: SourceImage,
        caption: str,
        stem: Optional[str] = None,
    ) -> StickerResult:
        image_bytes, filename = _read_source(source)
        cutout = self.cutout_client.remove_background(image_bytes, filename=filename)
        canvas = self.render(cutout, caption)
        return self.exporter.export(
            canvas, self.config.output_dir, stem or _output_stem("sticker")
        )

    def prompt_to_sticker(
        self,
        prompt: str,
        caption: Optional[str] = None,
        stem: Optional[str] = None,
    ) -> StickerResult:
        if not prompt.strip():
            raise InputError("Prompt must not be empty")
        image_bytes = self.generator_chain.generate(prompt)
        return self.image_to_sticker(
            image_bytes,
            caption if caption is not None else prompt,
            stem=stem,
        )


def image_to_sticker(
    source: SourceImage,
    caption: str,
    config: StickerConfig,
) -> StickerResult:
    return StickerPipeline(config).image_to_sticker(source, caption)


def _read_source(source: SourceImage) -> Tuple[bytes, str]:
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        filename = "image.png"
    else:
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise InputError(f"Could not read source image '{path}': {exc}") from exc
        filename = path.name

    if not data:
        raise InputError("Source image is empty")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise InputError(f"Source is not a readable image: {exc}") from exc
    return data, filename


def _output_stem(prefix: str) -> str:
    # Timestamp for ordering, random suffix so concurrent requests never collide.
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"
