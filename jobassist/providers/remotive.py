"""Remotive: free API for remote tech jobs (no API key required).

Docs: https://remotive.com/api/remote-jobs
Only queries that ask for remote work are routed here.
"""
from __future__ import annotations

from jobassist.errors import ProviderMalformedResponse
from jobassist.log import get_logger
from jobassist.models import ProviderKind, Query, ResultItem
from jobassist.providers.base import Provider, http_json

log = get_logger(__name__)

API_URL = "https://remotive.com/api/remote-jobs"

# Remotive matches short, broad terms better than full role titles.
_GENERIC_WORDS = {
    "senior", "junior", "lead", "staff", "principal", "manager",
    "engineer", "specialist", "consultant", "ii", "iii", "iv", "sr", "jr",
}


def search_term(keywords: str) -> str:
    words = keywords.lower().split()
    distinctive = [w for w in words if w not in _GENERIC_WORDS]
    if distinctive:
        return distinctive[0]
    return words[0] if words else ""


class RemotiveSource(Provider):
    name = "remotive"
    kind = ProviderKind.JOB_SEARCH

    @property
    def configured(self) -> bool:
        return self.settings.remotive_enabled

    def accepts(self, request: Query) -> bool:
        return bool(request.filters.get("remote"))

    def fetch(self, request: Query) -> list[ResultItem]:
        term = search_term(request.keywords)
        data = http_json(
            self.name,
            "GET",
            API_URL,
            params={"search": term, "limit": request.results_per_page},
            timeout=self.settings.http_timeout,
        )
        hits = data.get("jobs") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            raise ProviderMalformedResponse("missing 'jobs' list", self.name)

        items: list[ResultItem] = []
        for hit in hits[: request.results_per_page]:
            if not isinstance(hit, dict):
                continue
            items.append(
                ResultItem(
                    id=f"remotive:{hit.get('id', '')}",
                    title=hit.get("title") or "",
                    company=hit.get("company_name") or "",
                    location=hit.get("candidate_required_location") or "Remote",
                    description=hit.get("description") or "",
                    url=hit.get("url") or "",
                    posted_at=hit.get("publication_date"),
                    required_skills=[str(t) for t in hit.get("tags") or []],
                    source="remotive",
                    raw=hit,
                )
            )
        log.debug("Remotive search=%r returned %d jobs", term, len(items))
        return items
