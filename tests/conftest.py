"""
Shared fixtures for the test suite.

No test touches the network: provider credentials are stripped from the
environment, and pipeline tests use in-memory stub providers.
"""

import time

import pytest

from jobassist.config import Settings
from jobassist.models import Profile, ResultItem
from jobassist.providers.base import Provider

_CREDENTIAL_VARS = (
    "GROQ_API_KEY", "AI_API_KEY", "GROQ_LLM_MODEL", "AI_BASE_URL",
    "JSEARCH_API_KEY", "RAPIDAPI_KEY", "REMOTIVE_ENABLED", "YOUTUBE_API_KEY",
    "HTTP_TIMEOUT", "BREAKER_FAILURE_THRESHOLD", "BREAKER_RESET_SECONDS",
    "RETRY_ATTEMPTS", "PAGE_SIZE", "MAX_FANOUT", "LOG_TO_FILE",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Remove real credentials so nothing can reach a live API."""
    for var in _CREDENTIAL_VARS:
        monkeypatch.delenv(var, raising=False)


class StubProvider(Provider):
    """In-memory provider.

    *result* is a value or a function of the request; *error* is an
    exception instance or a function returning one (or None) per request.
    """

    def __init__(self, name, kind, result=None, error=None, configured=True,
                 accepts=None, delay=0.0, settings=None):
        super().__init__(settings or Settings())
        self.name = name
        self.kind = kind
        self._result = result
        self._error = error
        self._configured = configured
        self._accepts = accepts
        self.delay = delay
        self.calls = []

    @property
    def configured(self):
        return self._configured

    def accepts(self, request):
        return self._accepts(request) if self._accepts else True

    def fetch(self, request):
        self.calls.append(request)
        if self.delay:
            time.sleep(self.delay)
        error = self._error(request) if callable(self._error) else self._error
        if error is not None:
            raise error
        return self._result(request) if callable(self._result) else self._result


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def make_item():
    def _make(id, title="Software Developer", **kwargs):
        kwargs.setdefault("company", "Acme")
        kwargs.setdefault("source", "test")
        return ResultItem(id=id, title=title, **kwargs)

    return _make


@pytest.fixture
def profile():
    return Profile(
        skills=("React", "Node.js"),
        location="United States",
        preferred_title="React Developer",
    )
