"""Uniform call-and-normalize wrapper around the upstream providers.

``ProviderAdapter.call`` validates the request, picks exactly one provider,
checks its circuit breaker, contacts it once and returns the normalized
result, or raises a typed ``ProviderError``. It never retries and never
falls back; both are the pipeline's job.
"""
from __future__ import annotations

import time
from typing import Any, Callable, Iterable

import requests

from jobassist.circuit_breaker import CircuitBreaker
from jobassist.config import Settings
from jobassist.errors import (
    InvalidRequest,
    ProviderMalformedResponse,
    ProviderUnconfigured,
    ProviderUnreachable,
)
from jobassist.log import get_logger
from jobassist.models import CalendarReminder, GenerationRequest, ProviderKind, Query
from jobassist.parsing import parse_structured
from jobassist.providers import Provider, build_providers
from jobassist.providers.google_calendar import parse_start
from jobassist.schemas import SCHEMAS

log = get_logger(__name__)

# raised by normalizers walking a payload of the wrong shape
_SHAPE_ERRORS = (TypeError, AttributeError, KeyError, IndexError, ValueError)

_REQUEST_TYPES: dict[ProviderKind, type] = {
    ProviderKind.JOB_SEARCH: Query,
    ProviderKind.VIDEO_SEARCH: Query,
    ProviderKind.AI_GENERATE: GenerationRequest,
    ProviderKind.RESUME_PARSE: GenerationRequest,
    ProviderKind.CALENDAR_WRITE: CalendarReminder,
}


def _require(value: Any, field: str, kind: ProviderKind) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{kind.value} request requires a non-empty '{field}'")


def validate_request(kind: ProviderKind, request: Any) -> None:
    """Raise ``InvalidRequest`` if *request* is missing a required field."""
    expected = _REQUEST_TYPES[kind]
    if not isinstance(request, expected):
        raise InvalidRequest(
            f"{kind.value} expects {expected.__name__}, got {type(request).__name__}"
        )

    if kind in (ProviderKind.JOB_SEARCH, ProviderKind.VIDEO_SEARCH):
        _require(request.keywords, "keywords", kind)
        if request.page < 1 or request.results_per_page < 1:
            raise InvalidRequest("page and results_per_page must be >= 1")
    elif kind == ProviderKind.AI_GENERATE:
        _require(request.subject_title, "subject_title", kind)
        _require(request.prompt, "prompt", kind)
    elif kind == ProviderKind.RESUME_PARSE:
        _require(request.context.get("resume_text", ""), "resume_text", kind)
        _require(request.prompt, "prompt", kind)
    elif kind == ProviderKind.CALENDAR_WRITE:
        _require(request.job_title, "job_title", kind)
        _require(request.company, "company", kind)
        _require(request.access_token, "access_token", kind)
        _require(request.start, "start", kind)
        parse_start(request.start)


class ProviderAdapter:
    def __init__(
        self,
        settings: Settings,
        providers: Iterable[Provider] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.providers: list[Provider] = (
            list(providers) if providers is not None else build_providers(settings)
        )
        self._breakers: dict[str, CircuitBreaker] = {
            p.name: CircuitBreaker(
                p.name,
                failure_threshold=settings.breaker_failure_threshold,
                reset_seconds=settings.breaker_reset_seconds,
                clock=clock,
            )
            for p in self.providers
        }

    def breaker(self, name: str) -> CircuitBreaker:
        return self._breakers[name]

    def providers_for(self, kind: ProviderKind, request: Any = None) -> list[str]:
        """Names of configured providers of *kind* that accept *request*, in order."""
        kind = ProviderKind(kind)
        return [
            p.name
            for p in self.providers
            if p.kind == kind and p.configured and (request is None or p.accepts(request))
        ]

    def _select(self, kind: ProviderKind, request: Any, provider: str | None) -> Provider:
        if provider is not None:
            for p in self.providers:
                if p.name == provider and p.kind == kind:
                    if not p.configured:
                        raise ProviderUnconfigured("no credential configured", p.name)
                    return p
            raise ProviderUnconfigured(f"no {kind.value} provider named {provider!r}")

        for p in self.providers:
            if p.kind == kind and p.configured and p.accepts(request):
                return p
        raise ProviderUnconfigured(f"no configured {kind.value} provider")

    def call(self, kind: ProviderKind, request: Any, provider: str | None = None) -> Any:
        kind = ProviderKind(kind)
        validate_request(kind, request)
        target = self._select(kind, request, provider)
        breaker = self._breakers[target.name]

        if not breaker.allow():
            raise ProviderUnreachable(
                f"circuit open, retry in {breaker.retry_in():.0f}s "
                f"(last failure: {breaker.last_failure or 'unknown'})",
                target.name,
            )

        settled = False
        try:
            try:
                raw = target.fetch(request)
            except ProviderUnconfigured as exc:
                if target.shared_credential:
                    breaker.record_failure(str(exc))
                    settled = True
                raise
            except ProviderUnreachable as exc:
                breaker.record_failure(str(exc))
                settled = True
                raise
            except ProviderMalformedResponse:
                breaker.record_success()
                settled = True
                raise
            except (requests.RequestException, OSError) as exc:
                breaker.record_failure(str(exc))
                settled = True
                raise ProviderUnreachable(str(exc), target.name) from exc
            except _SHAPE_ERRORS as exc:
                # the provider answered, but not in a shape its normalizer expects
                breaker.record_success()
                settled = True
                raise ProviderMalformedResponse(f"unexpected payload: {exc!r}", target.name) from exc
            breaker.record_success()
            settled = True
        finally:
            if not settled:
                breaker.release_trial()

        if kind in (ProviderKind.AI_GENERATE, ProviderKind.RESUME_PARSE):
            try:
                return self._normalize_generation(target.name, request, raw)
            except _SHAPE_ERRORS as exc:
                raise ProviderMalformedResponse(f"unexpected payload: {exc!r}", target.name) from exc
        return raw

    def _normalize_generation(self, provider: str, request: GenerationRequest, raw: str) -> Any:
        schema = SCHEMAS.get(request.generation)
        if schema is not None:
            return parse_structured(raw, schema, provider)
        if not isinstance(raw, str) or not raw.strip():
            raise ProviderMalformedResponse("empty text reply", provider)
        return raw.strip()
