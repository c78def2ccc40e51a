"""Generative model client for resume review.

Provider-agnostic via LiteLLM. Every call asks for a JSON response and is
bounded by ``settings.llm_timeout_seconds``; whatever text comes back goes
through the output parser, so only transport failures are errors here.
"""

import logging
from typing import Any, Optional

from ..core.config import settings
from ..exceptions import UpstreamUnavailableError
from . import prompts
from .output_parser import EnhancementContent, ReviewContent, parse

logger = logging.getLogger(__name__)


class ReviewModel:
    """Sends role-tagged prompts to the configured model and parses the replies."""

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
    ):
        self.model = model or settings.generation_model
        self.api_key = api_key if api_key is not None else settings.llm_api_key
        self.api_base = api_base if api_base is not None else settings.llm_api_base
        self.timeout = timeout or settings.llm_timeout_seconds
        self.temperature = settings.llm_temperature if temperature is None else temperature

    @property
    def model_identifier(self) -> str:
        return self.model

    def complete(self, system: str, prompt: str) -> str:
        """Run one JSON-mode completion and return the raw response text.

        Raises:
            UpstreamUnavailableError: the provider could not be reached, timed
                out, or rejected the request.
        """
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        kwargs: dict = {
            "model": self.model,
            "messages": messages,
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
            "timeout": self.timeout,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base

        try:
            import litellm

            response = litellm.completion(**kwargs)
        except Exception as e:
            logger.warning("Model call to %s failed: %s", self.model, e)
            raise UpstreamUnavailableError(
                f"Generative model {self.model} is unavailable", original_error=e
            ) from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError):
            text = None
        return text or "{}"

    def review(self, text: str):
        """First analysis of a resume."""
        raw = self.complete(prompts.REVIEW_SYSTEM_PROMPT, prompts.build_review_prompt(text))
        return parse(raw, ReviewContent)

    def regenerate(self, text: str, previous_content: Any, rating: Optional[int], comment: Optional[str]):
        """New analysis informed by the previous one and the reviewer's feedback."""
        prompt = prompts.build_regeneration_prompt(text, previous_content, rating, comment)
        raw = self.complete(prompts.REVIEW_SYSTEM_PROMPT, prompt)
        return parse(raw, ReviewContent)

    def enhance(self, fields: dict, resume_text: str, render_options: dict):
        """Ask the model to polish composed resume text before rendering."""
        prompt = prompts.build_enhance_prompt(fields, resume_text, render_options)
        raw = self.complete(prompts.ENHANCE_SYSTEM_PROMPT, prompt)
        return parse(raw, EnhancementContent)
