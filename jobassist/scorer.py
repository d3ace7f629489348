"""Score and rank results against a profile: AI ranking, heuristic fallback."""
from __future__ import annotations

import re
from dataclasses import dataclass, replace

from jobassist.errors import AllSourcesExhausted, ProviderError, ProviderMalformedResponse
from jobassist.fallback import contains_term
from jobassist.log import get_logger
from jobassist.models import ExperienceLevel, GenerationRequest, Profile, ProviderKind, ResultItem
from jobassist.prompts import ranking_prompt

log = get_logger(__name__)

BASE_SCORE = 70
SKILL_POINT = 1
SKILL_CAP = 10
LOCATION_BONUS = 10
LEVEL_BONUS = 5
HEURISTIC_REASON = "Heuristic ranking (AI unavailable)"

LOCATION_ALIASES: dict[str, list[str]] = {
    "united states": ["united states", "usa", "us", "u.s."],
    "new york": ["new york", "nyc", "ny"],
    "san francisco": ["san francisco", "sf", "bay area"],
    "bangalore": ["bangalore", "bengaluru"],
    "gurgaon": ["gurgaon", "gurugram"],
    "remote": ["remote", "anywhere", "work from home", "wfh"],
}

LEVEL_KEYWORDS: dict[ExperienceLevel, list[str]] = {
    ExperienceLevel.ENTRY: ["entry level", "entry-level", "junior", "graduate", "intern", "new grad"],
    ExperienceLevel.ASSOCIATE: ["associate", "junior", "ii"],
    ExperienceLevel.MID: ["mid-level", "mid level", "intermediate", "ii", "iii"],
    ExperienceLevel.SENIOR: ["senior", "sr", "lead", "staff", "principal"],
    ExperienceLevel.DIRECTOR: ["director", "head of", "vp", "vice president"],
    ExperienceLevel.EXECUTIVE: ["chief", "cto", "ceo", "cio", "executive", "vp", "vice president"],
}


def _normalize(s: str | None) -> str:
    return (s or "").lower().strip()


def _expand_location(location: str) -> list[str]:
    """City aliases for every comma-separated part of *location*."""
    expanded: list[str] = []
    for part in _normalize(location).split(","):
        key = part.strip()
        if not key:
            continue
        expanded.extend(LOCATION_ALIASES.get(key, [key]))
    return list(dict.fromkeys(expanded))


def _location_match(item: ResultItem, profile: Profile) -> str:
    job_loc = _normalize(item.location)
    for alias in _expand_location(profile.location):
        if contains_term(job_loc, alias):
            return "Location match"
    if profile.remote_allowed:
        text = job_loc + " " + _normalize(item.title)
        if any(contains_term(text, alias) for alias in LOCATION_ALIASES["remote"]):
            return "Remote match"
    return ""


def _level_match(item: ResultItem, level: ExperienceLevel) -> bool:
    text = _normalize(item.title) + " " + _normalize(item.description)[:500]
    text = re.sub(r"[^a-z0-9 -]", " ", text)
    return any(contains_term(text, kw) for kw in LEVEL_KEYWORDS[level])


def heuristic_score(item: ResultItem, profile: Profile) -> tuple[float, str]:
    """Deterministic score in [0, 100] and the reason text for one item."""
    reasons: list[str] = []
    score = float(BASE_SCORE)

    matched = [s for s in dict.fromkeys(profile.skills) if s.strip() and contains_term(item.title, s)]
    if matched:
        score += min(SKILL_POINT * len(matched), SKILL_CAP)
        reasons.append("skills in title: " + ", ".join(matched[:5]))

    location = _location_match(item, profile)
    if location:
        score += LOCATION_BONUS
        reasons.append(location.lower())

    if _level_match(item, profile.experience_level):
        score += LEVEL_BONUS
        reasons.append(f"{profile.experience_level.value} level fit")

    score = max(0.0, min(100.0, score))
    reason = HEURISTIC_REASON + (": " + "; ".join(reasons) if reasons else "")
    return score, reason


def rank_heuristically(items: list[ResultItem], profile: Profile) -> list[ResultItem]:
    scored = []
    for item in items:
        score, reason = heuristic_score(item, profile)
        scored.append(replace(item, score=score, score_reason=reason))
    # sorted() is stable: equal scores keep their merge order
    return sorted(scored, key=lambda i: -i.score)


def apply_ranking(items: list[ResultItem], ranking: list[dict]) -> list[ResultItem]:
    """Order *items* by an AI ranking of 1-based ``itemIndex`` entries.

    Unknown and repeated indices are ignored; items the AI left out are
    appended in their original order with no score.
    """
    ranked: list[ResultItem] = []
    used: set[int] = set()
    for entry in ranking:
        idx = entry["itemIndex"] - 1
        if idx < 0 or idx >= len(items) or idx in used:
            continue
        used.add(idx)
        ranked.append(replace(items[idx], score=float(entry["score"]), score_reason=entry.get("reason") or None))

    if not ranked:
        raise ProviderMalformedResponse("ranking references no known item")

    ranked.sort(key=lambda i: -i.score)
    unranked = [replace(item, score=None, score_reason=None) for i, item in enumerate(items) if i not in used]
    return ranked + unranked


@dataclass
class ScoreOutcome:
    items: list[ResultItem]
    used_fallback: bool = False


class RelevanceScorer:
    def __init__(self, adapter) -> None:
        self.adapter = adapter

    def score(self, items: list[ResultItem], profile: Profile) -> ScoreOutcome:
        if not items:
            return ScoreOutcome(items=[])

        try:
            ranked = self._ai_rank(items, profile)
            log.info("AI ranked %d items", len(items))
            return ScoreOutcome(items=ranked)
        except ProviderError as exc:
            log.warning("AI ranking unavailable (%s), using heuristic ranking", exc)

        try:
            ranked = rank_heuristically(items, profile)
        except Exception as exc:
            raise AllSourcesExhausted("heuristic ranking failed after AI ranking was unavailable") from exc
        log.info("Heuristically ranked %d items", len(items))
        return ScoreOutcome(items=ranked, used_fallback=True)

    def _ai_rank(self, items: list[ResultItem], profile: Profile) -> list[ResultItem]:
        request = GenerationRequest(
            subject_title=profile.preferred_title or "job ranking",
            generation="ranking",
            prompt=ranking_prompt(items, profile),
        )
        ranking = self.adapter.call(ProviderKind.AI_GENERATE, request)
        return apply_ranking(items, ranking)
