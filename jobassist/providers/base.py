from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import requests

from jobassist.config import Settings
from jobassist.errors import ProviderMalformedResponse, ProviderUnconfigured, ProviderUnreachable
from jobassist.models import ProviderKind


class Provider(ABC):
    """One upstream API. ``fetch`` contacts it exactly once, no retries."""

    name: str = ""
    kind: ProviderKind
    # False when the credential arrives with each request (e.g. a user's
    # OAuth token); a rejected token then says nothing about the provider.
    shared_credential: bool = True

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def configured(self) -> bool:
        return True

    def accepts(self, request: Any) -> bool:
        return True

    @abstractmethod
    def fetch(self, request: Any) -> Any:
        pass


def http_json(
    provider: str,
    method: str,
    url: str,
    *,
    timeout: float,
    **kwargs: Any,
) -> Any:
    """Send one HTTP request and decode its JSON body into typed failures."""
    try:
        r = requests.request(method, url, timeout=timeout, **kwargs)
    except (requests.RequestException, OSError) as exc:
        raise ProviderUnreachable(str(exc), provider) from exc

    if r.status_code in (401, 403):
        raise ProviderUnconfigured(f"credential rejected (HTTP {r.status_code})", provider)
    if r.status_code >= 400:
        raise ProviderUnreachable(f"HTTP {r.status_code}", provider)
    try:
        return r.json()
    except ValueError as exc:
        raise ProviderMalformedResponse("response body is not JSON", provider) from exc
