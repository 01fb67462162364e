import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from langchain_openai import ChatOpenAI

from sticker.captions import CaptionGenerator, fallback_caption
from sticker.core import StickerConfig, StickerPipeline
from sticker.errors import StickerError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Turn an image or a text prompt into an outlined, captioned sticker."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--image",
        type=Path,
        help="Path to the source image to cut out.",
    )
    source.add_argument(
        "--prompt",
        help="Text prompt used to generate the source image.",
    )
    parser.add_argument(
        "--caption",
        help="Caption text. Defaults to an LLM suggestion (or the prompt) when omitted.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Folder where the PNG and WEBP stickers are written.",
    )
    parser.add_argument(
        "--font",
        default=None,
        help="Path to a bold TrueType font for the caption.",
    )
    return parser.parse_args(argv)


def suggest_caption(config: StickerConfig, prompt: str) -> str:
    # Without an OpenAI key there is no LLM; use the prompt itself.
    if not config.openai_api_key:
        return fallback_caption(prompt)

    llm = ChatOpenAI(
        model="gpt-4o-mini",
        temperature=0.9,
        api_key=config.openai_api_key,
    )
    caption = CaptionGenerator(llm=llm).generate(prompt)
    print(f"💬 Suggested caption: {caption}")
    return caption


def main(argv: Optional[List[str]] = None) -> int:
    # Load environment variables from a local .env file if present
    # (e.g. REMOVEBG_API_KEY=..., OPENAI_API_KEY=sk-...).
    load_dotenv()

    args = parse_args(argv)

    config = StickerConfig.from_env()
    if args.output_dir is not None:
        config.output_dir = args.output_dir
    if args.font:
        config.font_path = args.font

    pipeline = StickerPipeline(config)
    try:
        if args.image is not None:
            caption = args.caption if args.caption is not None else ""
            result = pipeline.image_to_sticker(args.image, caption)
        else:
            caption = args.caption
            if caption is None:
                caption = suggest_caption(config, args.prompt)
            result = pipeline.prompt_to_sticker(args.prompt, caption)
    except StickerError as exc:
        print(f"❌ Sticker failed at stage '{exc.stage}': {exc}", file=sys.stderr)
        return 1

    print(f"PNG:  {result.primary}")
    print(f"WEBP: {result.alternate}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
