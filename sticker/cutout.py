import io
from typing import Any, Optional

import requests
from PIL import Image, UnidentifiedImageError

from .errors import ServiceError


REMOVE_BG_URL = "https://api.remove.bg/v1.0/removebg"


class RemoveBgClient:
    """
    Background removal through the remove.bg API.

    Returns the subject as an RGBA image on a transparent background. Any
    failure surfaces as a ServiceError; retries are left to the caller.
    """

    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[Any] = None,
        timeout: float = 60,
        url: str = REMOVE_BG_URL,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.url = url

    def remove_background(self, image_bytes: bytes, filename: str = "image.png") -> Image.Image:
        if not self.api_key:
            raise ServiceError("REMOVEBG_API_KEY is not set. A key is required for background removal.")

        print("✂️  Removing background (remove.bg)...")
        try:
            resp = self.session.post(
                self.url,
                files={"image_file": (filename, image_bytes)},
                data={"size": "auto"},
                headers={"X-Api-Key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ServiceError(f"remove.bg request failed: {exc}") from exc

        if resp.status_code != 200:
            raise ServiceError(
                f"remove.bg returned HTTP {resp.status_code}: {resp.text[:200]}"
            )

        try:
            cutout = Image.open(io.BytesIO(resp.content))
            cutout.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ServiceError(f"remove.bg returned an unreadable image: {exc}") from exc

        return cutout.convert("RGBA")
