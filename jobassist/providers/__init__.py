from .base import Provider
from .google_calendar import GoogleCalendarSource
from .jsearch import JSearchSource
from .llm import LLMProvider, LLMResumeProvider
from .remotive import RemotiveSource
from .youtube import YouTubeSource

from jobassist.config import Settings
from jobassist.log import get_logger

log = get_logger(__name__)

__all__ = [
    "Provider", "JSearchSource", "RemotiveSource", "LLMProvider",
    "LLMResumeProvider", "YouTubeSource", "GoogleCalendarSource",
    "build_providers",
]

# Registration order is the call order when several providers share a kind.
_PROVIDER_CLASSES: tuple[type[Provider], ...] = (
    JSearchSource,
    RemotiveSource,
    LLMProvider,
    LLMResumeProvider,
    YouTubeSource,
    GoogleCalendarSource,
)


def build_providers(settings: Settings) -> list[Provider]:
    providers: list[Provider] = []
    for cls in _PROVIDER_CLASSES:
        provider = cls(settings)
        providers.append(provider)
        if provider.configured:
            log.debug("Registered provider: %s (%s)", provider.name, provider.kind.value)
        else:
            log.debug("Provider %s not configured, its calls will use fallbacks", provider.name)
    return providers
