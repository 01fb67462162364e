"""
Sticker package: turns an image (or a text prompt) plus a caption into an
outlined, captioned sticker.

Modules:
- core: pipeline orchestration and configuration
- outline: alpha mask, silhouette dilation and outline compositing
- render: caption wrapping, placement and drawing
- export: PNG + lossless WEBP encoding
- cutout: remove.bg background-removal client
- generator: text-to-image adapters tried in order
- captions: LLM caption suggestions
- errors: stage-tagged failures
"""
