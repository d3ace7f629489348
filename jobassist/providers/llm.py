"""OpenAI-compatible chat completion (Groq by default) for AI generation."""
from __future__ import annotations

import openai
from openai import OpenAI

from jobassist.config import Settings
from jobassist.errors import ProviderMalformedResponse, ProviderUnconfigured, ProviderUnreachable
from jobassist.log import get_logger
from jobassist.models import GenerationRequest, ProviderKind
from jobassist.providers.base import Provider

log = get_logger(__name__)

# (max_tokens, temperature) per generation type
_GENERATION_LIMITS: dict[str, tuple[int, float]] = {
    "ranking": (1200, 0.1),
    "interview_prep": (2500, 0.4),
    "roadmap": (2000, 0.7),
    "skill_gap": (1500, 0.5),
    "resume": (1000, 0.1),
}


class LLMProvider(Provider):
    name = "llm"
    kind = ProviderKind.AI_GENERATE

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self._client: OpenAI | None = None
        if settings.ai_configured:
            self._client = OpenAI(
                api_key=settings.ai_api_key,
                base_url=settings.ai_base_url,
                timeout=settings.http_timeout * 4,
                max_retries=0,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    def fetch(self, request: GenerationRequest) -> str:
        if self._client is None:
            raise ProviderUnconfigured("no AI API key", self.name)

        max_tokens, temperature = _GENERATION_LIMITS.get(request.generation, (1500, 0.5))
        try:
            resp = self._client.chat.completions.create(
                model=self.settings.ai_model,
                messages=[{"role": "user", "content": request.prompt}],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise ProviderUnconfigured(f"credential rejected: {exc}", self.name) from exc
        except openai.APIError as exc:
            raise ProviderUnreachable(str(exc), self.name) from exc

        if not resp.choices:
            raise ProviderMalformedResponse("reply has no choices", self.name)
        text = (resp.choices[0].message.content or "").strip()
        log.debug("LLM %s reply: %d chars", request.generation or "generation", len(text))
        return text


class LLMResumeProvider(LLMProvider):
    """Résumé parsing through the same LLM with a structured-extraction prompt."""

    name = "llm-resume"
    kind = ProviderKind.RESUME_PARSE
