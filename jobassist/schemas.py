"""Pydantic schemas for structured AI output."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class RankingEntry(BaseModel):
    itemIndex: int = Field(..., ge=1, description="1-based index into the prompt's item list")
    score: float = Field(..., ge=0, le=100)
    reason: str = ""


RANKING_SCHEMA = list[RankingEntry]


class CompanyResearch(BaseModel):
    keyFacts: list[str] = Field(..., min_length=1)
    recentNews: list[str] = Field(default_factory=list)
    culture: str = ""
    values: list[str] = Field(default_factory=list)


class StarExample(BaseModel):
    situation: str
    task: str
    action: str
    result: str


class Timeline(BaseModel):
    week1: str = ""
    week2: str = ""
    week3: str = ""
    final: str = ""


class InterviewPrep(BaseModel):
    companyResearch: CompanyResearch
    technicalQuestions: list[str] = Field(..., min_length=1)
    behavioralQuestions: list[str] = Field(..., min_length=1)
    questionsToAsk: list[str] = Field(..., min_length=1)
    starExamples: list[StarExample] = Field(..., min_length=1)
    preparationChecklist: list[str] = Field(..., min_length=1)
    technicalTopics: list[str] = Field(default_factory=list)
    skillsToHighlight: list[str] = Field(default_factory=list)
    mockScenarios: list[str] = Field(default_factory=list)
    redFlags: list[str] = Field(default_factory=list)
    timeline: Timeline = Field(default_factory=Timeline)


INTERVIEW_PREP_KEYS: tuple[str, ...] = tuple(InterviewPrep.model_fields)


class ParsedResume(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    title: str = ""
    skills: list[str]
    experienceLevel: str = "associate"
    yearsExperience: int = Field(default=0, ge=0)
    suggestedJobTitles: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    summary: str = ""

    @field_validator("education", mode="before")
    @classmethod
    def _flatten_education(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        out: list[str] = []
        for entry in v:
            if isinstance(entry, dict):
                out.append(", ".join(str(x) for x in entry.values() if x))
            else:
                out.append(str(entry))
        return out

    @field_validator("skills", "suggestedJobTitles")
    @classmethod
    def _dedupe(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(s.strip() for s in v if s and s.strip()))


SCHEMAS: dict[str, Any] = {
    "ranking": RANKING_SCHEMA,
    "interview_prep": InterviewPrep,
    "resume": ParsedResume,
}
