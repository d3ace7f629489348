"""JSearch API (RapidAPI): aggregated job listings."""
from __future__ import annotations

import hashlib

from jobassist.errors import ProviderMalformedResponse
from jobassist.log import get_logger
from jobassist.models import ProviderKind, Query, ResultItem
from jobassist.providers.base import Provider, http_json

log = get_logger(__name__)

API_HOST = "jsearch.p.rapidapi.com"


def _location(hit: dict) -> str:
    parts = [hit.get("job_city"), hit.get("job_state"), hit.get("job_country")]
    text = ", ".join(p for p in parts if p)
    if hit.get("job_is_remote"):
        text = f"{text} (Remote)" if text else "Remote"
    return text


def _to_item(hit: dict) -> ResultItem:
    raw_id = hit.get("job_id") or f"{hit.get('job_title', '')}{hit.get('employer_name', '')}"
    if not hit.get("job_id"):
        raw_id = hashlib.sha256(raw_id.encode()).hexdigest()[:12]
    skills = hit.get("job_required_skills") or []
    if not isinstance(skills, list):
        skills = [skills]
    return ResultItem(
        id=f"jsearch:{raw_id}",
        title=hit.get("job_title") or "",
        company=hit.get("employer_name") or "",
        location=_location(hit),
        description=hit.get("job_description") or "",
        url=hit.get("job_apply_link") or "",
        salary_min=hit.get("job_min_salary"),
        salary_max=hit.get("job_max_salary"),
        posted_at=hit.get("job_posted_at_datetime_utc"),
        required_skills=[str(s) for s in skills],
        source="jsearch",
        raw=hit,
    )


class JSearchSource(Provider):
    name = "jsearch"
    kind = ProviderKind.JOB_SEARCH

    @property
    def configured(self) -> bool:
        return bool(self.settings.jsearch_api_key)

    def fetch(self, request: Query) -> list[ResultItem]:
        text = request.keywords
        if request.location:
            text = f"{text} in {request.location}"
        params: dict = {
            "query": text,
            "page": str(request.page),
            "num_pages": "1",
            "date_posted": request.filters.get("date_posted", "all"),
        }
        if request.filters.get("country"):
            params["country"] = request.filters["country"]
        if request.filters.get("remote"):
            params["work_from_home"] = "true"

        data = http_json(
            self.name,
            "GET",
            f"https://{API_HOST}/search",
            params=params,
            headers={
                "X-RapidAPI-Key": self.settings.jsearch_api_key,
                "X-RapidAPI-Host": API_HOST,
            },
            timeout=self.settings.http_timeout,
        )
        hits = data.get("data") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            raise ProviderMalformedResponse("missing 'data' list", self.name)

        items = [_to_item(hit) for hit in hits[: request.results_per_page] if isinstance(hit, dict)]
        log.debug("JSearch query=%r page=%d returned %d jobs", text, request.page, len(items))
        return items
