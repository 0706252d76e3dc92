"""Plain-language narration of a decode result through an OpenAI-compatible API."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from openai import OpenAI, OpenAIError

from ..models import DecodeResult
from .gate import ExplainerPrompt, build_prompt, validate_prompt_safety

logger = logging.getLogger(__name__)


@dataclass
class Narration:
    prompt: ExplainerPrompt
    text: Optional[str] = None
    used_ai: bool = False
    error: Optional[str] = None


def format_fixed_response(response: Dict[str, str]) -> str:
    sections = [response["summary"]]
    for key, title in (
        ("what_changes", "What Changes"),
        ("who_benefits", "Who Benefits"),
        ("permanence", "Permanence"),
        ("reversibility", "Reversibility"),
    ):
        if response.get(key):
            sections.append(f"## {title}\n\n{response[key]}")
    if response.get("note"):
        sections.append(response["note"])
    return "\n\n".join(sections)


class Narrator:
    """Runs the model only when the gate allows it."""

    def __init__(self, model: str = "gpt-4o-mini", client: Optional[OpenAI] = None):
        self.model = model
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI()
        return self._client

    def explain(self, result: DecodeResult) -> Narration:
        """
        Explain a decode result.

        Args:
            result: Completed DecodeResult

        Returns:
            Narration with the model text, or the fixed response when the gate skips
        """
        prompt = build_prompt(result)
        if prompt.skip_ai:
            return Narration(prompt=prompt, text=format_fixed_response(prompt.fixed_response))

        safety = validate_prompt_safety(prompt)
        if not safety.safe:
            logger.error(f"Refusing to send prompt: {'; '.join(safety.issues)}")
            return Narration(prompt=prompt, error="; ".join(safety.issues))

        try:
            logger.info(f"Requesting {prompt.flow} explanation from {self.model}")
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": prompt.system},
                    {"role": "user", "content": prompt.user},
                ],
            )
        except OpenAIError as e:
            logger.error(f"Explanation request failed: {e}")
            return Narration(prompt=prompt, error=str(e))

        text = response.choices[0].message.content
        logger.debug(f"Received explanation ({len(text or '')} chars)")
        return Narration(prompt=prompt, text=text, used_ai=True)
