"""Error taxonomy for the pipeline.

Only ``InvalidRequest``, ``AllSourcesExhausted`` and ``PipelineTimeout``
ever reach a caller; every ``ProviderError`` is absorbed by a fallback.
"""
from __future__ import annotations


class JobAssistError(Exception):
    pass


class InvalidRequest(JobAssistError):
    """Caller error: a required field is missing or malformed."""


class ProviderError(JobAssistError):
    def __init__(self, message: str, provider: str = "") -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}" if provider else message)


class ProviderUnconfigured(ProviderError):
    """No credential (or no provider at all) for the requested kind."""


class ProviderUnreachable(ProviderError):
    """Network failure, timeout, HTTP error, or an open circuit."""


class ProviderMalformedResponse(ProviderError):
    """Payload could not be parsed into the expected shape."""


class AllSourcesExhausted(JobAssistError):
    """Both the primary path and its fallback failed."""


class PipelineTimeout(JobAssistError):
    """The caller's request-level timeout expired before fan-in."""
