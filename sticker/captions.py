import json
from typing import Any


MAX_CAPTION_WORDS = 6


class CaptionGenerator:
    """
    Adapter for LLM-suggested sticker captions.
    """

    def __init__(self, llm: Any) -> None:
        self.llm = llm

    def generate(self, prompt: str) -> str:
        """
        Suggest a short caption for a sticker of `prompt`.

        If the model call fails or does not answer with the requested JSON
        object, fall back to a caption built from the prompt itself.
        """
        if self.llm is None:
            raise RuntimeError(
                "CaptionGenerator.llm is None. Configure a real LLM instance "
                "before calling generate()."
            )

        try:
            raw = self.llm.invoke(self._build_prompt(prompt))
        except Exception as e:
            print(f"⚠️  Error calling caption LLM: {e}. Using prompt as caption.")
            return fallback_caption(prompt)
        text = getattr(raw, "content", None) or str(raw)

        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return fallback_caption(prompt)

        caption = str(payload.get("caption") or "").strip() if isinstance(payload, dict) else ""
        return caption or fallback_caption(prompt)

    @staticmethod
    def _build_prompt(prompt: str) -> str:
        return (
            "You write captions for chat stickers.\n"
            f"- Keep it to at most {MAX_CAPTION_WORDS} words.\n"
            "- Make it playful and readable at a glance.\n"
            "- Do not use emoji or hashtags.\n\n"
            f'Sticker subject: "{prompt}"\n\n'
            "Return ONLY a valid JSON object with this exact shape and no surrounding commentary:\n"
            '{\n'
            '  "caption": "string"\n'
            "}\n"
        )


def fallback_caption(prompt: str) -> str:
    words = prompt.split()[:MAX_CAPTION_WORDS]
    return " ".join(words).upper()
