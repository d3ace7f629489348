"""Build a per-request Profile from defaults, request parameters or a parsed résumé."""
from __future__ import annotations

from typing import Any, Iterable

from jobassist.log import get_logger
from jobassist.models import ExperienceLevel, Profile

log = get_logger(__name__)

DEFAULTS: dict[str, Any] = {
    "title": "software developer",
    "location": "United States",
    "remote": False,
    "experience_level": "associate",
    "skills": ["JavaScript", "React", "Node.js"],
}


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(v).strip() for v in value if str(v).strip()]


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        key = v.lower()
        if key not in seen:
            seen.add(key)
            out.append(v)
    return tuple(out)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def build_profile(
    params: dict[str, Any] | None = None,
    resume: dict[str, Any] | None = None,
    defaults: dict[str, Any] | None = None,
) -> Profile:
    """Resolve a Profile: explicit *params*, then *resume*, then *defaults*.

    *resume* is a parsed résumé in the ``ParsedResume`` shape; when it
    suggests job titles and no title was requested, the first suggestion
    becomes the preferred title.
    """
    p = params or {}
    r = resume or {}
    d = {**DEFAULTS, **(defaults or {})}

    skills = _as_list(p.get("skills")) or _as_list(r.get("skills")) or _as_list(d.get("skills"))
    suggested = _as_list(r.get("suggestedJobTitles"))
    title = (
        (p.get("title") or p.get("query") or "").strip()
        or (suggested[0] if suggested else "")
        or (r.get("title") or "").strip()
        or d.get("title", "")
    )
    level = p.get("experience_level") or r.get("experienceLevel") or d.get("experience_level")
    location = (p.get("location") or "").strip() or d.get("location", "")
    if "remote" in p and p["remote"] is not None:
        remote = _as_bool(p["remote"])
    else:
        remote = _as_bool(d.get("remote", False))

    profile = Profile(
        skills=_dedupe(skills),
        experience_level=ExperienceLevel.parse(level),
        location=location,
        remote_allowed=remote,
        preferred_title=title,
        suggested_titles=_dedupe(suggested),
        summary=(r.get("summary") or "").strip(),
    )
    log.debug(
        "Profile resolved: title=%r level=%s skills=%d",
        profile.preferred_title, profile.experience_level.value, len(profile.skills),
    )
    return profile


def title_variants(profile: Profile, limit: int = 3) -> list[str]:
    """Distinct search titles: résumé suggestions first, then the preferred title."""
    titles = _dedupe(list(profile.suggested_titles) + [profile.preferred_title])
    return [t for t in titles if t.strip()][:limit]
