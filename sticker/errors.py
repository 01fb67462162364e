from typing import Optional


class StickerError(Exception):
    """
    Base failure for the sticker pipeline.

    `stage` names the pipeline stage that failed so callers can tell a
    cutout outage apart from a layout or encoding problem.
    """

    stage = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class InputError(StickerError):
    stage = "input"


class ServiceError(StickerError):
    # Remote collaborators: remove.bg ("cutout") and the generator chain ("generation").
    stage = "cutout"


class RenderError(StickerError):
    stage = "layout"


class EncodeError(StickerError):
    stage = "encode"
