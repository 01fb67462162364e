import base64
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import requests

from .errors import ServiceError


DEFAULT_SIZE = "1024x1024"
HUGGINGFACE_URL = (
    "https://api-inference.huggingface.co/models/stabilityai/stable-diffusion-xl-base-1.0"
)


@dataclass
class GenerationResult:
    name: str
    image_bytes: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.image_bytes is not None


class OpenAIImageGenerator:
    """
    Text-to-image via OpenAI's gpt-image-1 with a transparent background.
    """

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-image-1",
        size: str = DEFAULT_SIZE,
        client: Optional[Any] = None,
        session: Optional[Any] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.size = size
        self.client = client
        self.session = session or requests.Session()

    def generate(self, prompt: str) -> GenerationResult:
        if not self.api_key and self.client is None:
            return GenerationResult(self.name, error="OPENAI_API_KEY is not set")

        print(f"🎨 Generating image (OpenAI) for: \"{prompt}\"...")
        try:
            client = self.client
            if client is None:
                from openai import OpenAI

                client = OpenAI(api_key=self.api_key)

            result = client.images.generate(
                model=self.model,
                prompt=prompt,
                size=self.size,
                background="transparent",
            )
            item = result.data[0]
            if getattr(item, "b64_json", None):
                return GenerationResult(self.name, image_bytes=base64.b64decode(item.b64_json))

            resp = self.session.get(item.url, timeout=60)
            resp.raise_for_status()
            return GenerationResult(self.name, image_bytes=resp.content)
        except Exception as exc:
            return GenerationResult(self.name, error=str(exc))


class ReplicateImageGenerator:
    """
    Text-to-image via Replicate (Imagen 4 Fast), always square.
    """

    name = "replicate"

    def __init__(
        self,
        api_token: Optional[str],
        model: str = "google/imagen-4-fast",
        client: Optional[Any] = None,
        session: Optional[Any] = None,
    ) -> None:
        self.api_token = api_token
        self.model = model
        self.client = client
        self.session = session or requests.Session()

    def generate(self, prompt: str) -> GenerationResult:
        if not self.api_token and self.client is None:
            return GenerationResult(self.name, error="REPLICATE_API_TOKEN is not set")

        print(f"🎨 Generating image (Replicate) for: \"{prompt}\"...")
        # Sticker art needs a single subject the cutout service can isolate.
        final_prompt = (
            f"{prompt}. Sticker illustration of a single subject on a plain background. "
            "Do not include any text, letters, words, or typography in the image."
        )
        try:
            client = self.client
            if client is None:
                import replicate

                client = replicate.Client(api_token=self.api_token)

            output = client.run(
                self.model,
                input={"prompt": final_prompt, "aspect_ratio": "1:1", "megapixels": "1"},
            )
            if isinstance(output, (list, tuple)):
                output = output[0]
            if hasattr(output, "read"):
                return GenerationResult(self.name, image_bytes=output.read())

            resp = self.session.get(str(output), timeout=60)
            resp.raise_for_status()
            return GenerationResult(self.name, image_bytes=resp.content)
        except Exception as exc:
            return GenerationResult(self.name, error=str(exc))


class HuggingFaceImageGenerator:
    """
    Text-to-image via the Hugging Face inference API (SDXL base).
    """

    name = "huggingface"

    def __init__(
        self,
        api_key: Optional[str],
        url: str = HUGGINGFACE_URL,
        session: Optional[Any] = None,
        timeout: float = 120,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def generate(self, prompt: str) -> GenerationResult:
        if not self.api_key:
            return GenerationResult(self.name, error="HUGGINGFACE_API_KEY is not set")

        print(f"🎨 Generating image (Hugging Face) for: \"{prompt}\"...")
        try:
            resp = self.session.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={"inputs": prompt},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            return GenerationResult(self.name, error=str(exc))

        if not resp.ok:
            return GenerationResult(self.name, error=f"Hugging Face API error: {resp.text}")
        return GenerationResult(self.name, image_bytes=resp.content)


class GeneratorChain:
    """
    Tries each generator in order and returns the first image produced.
    """

    def __init__(self, generators: Sequence[Any]) -> None:
        self.generators = list(generators)

    def generate(self, prompt: str) -> bytes:
        failures: List[GenerationResult] = []
        for generator in self.generators:
            result = generator.generate(prompt)
            if result.ok:
                print(f"✅ Image generated by {result.name}")
                return result.image_bytes
            print(f"⚠️  {result.name} failed: {result.error}. Trying next generator...")
            failures.append(result)

        detail = "; ".join(f"{r.name}: {r.error}" for r in failures) or "no generators configured"
        raise ServiceError(f"All image generators failed ({detail})", stage="generation")
