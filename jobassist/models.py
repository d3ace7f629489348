"""Data models for profiles, queries, results and generations."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class ProviderKind(str, Enum):
    JOB_SEARCH = "job-search"
    RESUME_PARSE = "resume-parse"
    AI_GENERATE = "ai-generate"
    VIDEO_SEARCH = "video-search"
    CALENDAR_WRITE = "calendar-write"


class ExperienceLevel(str, Enum):
    ENTRY = "entry"
    ASSOCIATE = "associate"
    MID = "mid"
    SENIOR = "senior"
    DIRECTOR = "director"
    EXECUTIVE = "executive"

    @classmethod
    def parse(cls, value: str | None) -> "ExperienceLevel":
        if isinstance(value, cls):
            return value
        key = (value or "").strip().lower()
        for level in cls:
            if level.value == key:
                return level
        return cls.ASSOCIATE


@dataclass(frozen=True)
class Profile:
    skills: tuple[str, ...] = ()
    experience_level: ExperienceLevel = ExperienceLevel.ASSOCIATE
    location: str = ""
    remote_allowed: bool = False
    preferred_title: str = ""
    suggested_titles: tuple[str, ...] = ()
    summary: str = ""


@dataclass
class ResultItem:
    id: str
    title: str
    company: str = ""
    location: str = ""
    description: str = ""
    url: str = ""
    salary_min: float | None = None
    salary_max: float | None = None
    posted_at: str | None = None
    required_skills: list[str] = field(default_factory=list)
    source: str = "unknown"
    score: float | None = None
    score_reason: str | None = None
    raw: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("raw")
        return data


@dataclass
class Query:
    keywords: str
    location: str = ""
    page: int = 1
    results_per_page: int = 20
    filters: dict[str, Any] = field(default_factory=dict)


@dataclass
class GenerationRequest:
    """Input for AI content generation.

    ``generation`` selects the schema/template (``interview_prep``,
    ``roadmap``, ``skill_gap``, ``ranking``, ``resume``); ``prompt`` is
    filled in by the pipeline before the adapter is called.
    """

    subject_title: str
    context: dict[str, str] = field(default_factory=dict)
    generation: str = ""
    prompt: str = ""


@dataclass
class CalendarReminder:
    """An interview (or application-deadline) reminder to write to a calendar."""

    job_title: str
    company: str
    start: str
    access_token: str = ""
    notes: str = ""
    reminder_type: str = "interview"
    application_url: str = ""
    time_zone: str = "America/New_York"


@dataclass
class GenerationResult:
    kind: str
    data: Any = None
    text: str | None = None
    using_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "data": self.data,
            "text": self.text,
            "usingFallback": self.using_fallback,
        }


@dataclass
class PipelineResponse:
    kind: str
    items: list[ResultItem] = field(default_factory=list)
    generation: GenerationResult | None = None
    used_fallback: bool = False
    total: int = 0
    page: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "items": [i.to_dict() for i in self.items],
            "generation": self.generation.to_dict() if self.generation else None,
            "usedFallback": self.used_fallback,
            "total": self.total,
            "page": self.page,
        }
