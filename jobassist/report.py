"""Render pipeline responses as Markdown."""
from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from jobassist.models import GenerationResult, PipelineResponse, ResultItem

_TITLES = {
    "search": "Job Search Results",
    "recommend": "Recommended Jobs",
    "interview_prep": "Interview Preparation",
    "roadmap": "Career Roadmap",
    "skill_gap": "Skill Gap Analysis",
    "resume": "Parsed Résumé",
    "calendar": "Calendar Reminder",
}

_FALLBACK_NOTE = "> _Offline fallback: some content was generated locally because a provider was unavailable._"


def _clip(text: str, width: int) -> str:
    text = (text or "").replace("|", "/").replace("\n", " ")
    return text[:width] + ("…" if len(text) > width else "")


def _short_url_label(url: str) -> str:
    host = (urlparse(url).hostname or "").replace("www.", "")
    parts = host.split(".")
    return parts[0].capitalize() if parts and parts[0] else "Link"


def _items_table(items: list[ResultItem]) -> list[str]:
    lines = [
        "| # | Role | Company | Location | Score | Link |",
        "|--:|------|---------|----------|------:|------|",
    ]
    for i, item in enumerate(items, 1):
        score = f"{item.score:.0f}" if item.score is not None else "—"
        link = f"[{_short_url_label(item.url)}]({item.url})" if item.url else "—"
        lines.append(
            f"| {i} | {_clip(item.title, 40)} | {_clip(item.company, 22)} "
            f"| {_clip(item.location.split(',')[0], 18)} | {score} | {link} |"
        )
    return lines


def _reasons(items: list[ResultItem]) -> list[str]:
    lines: list[str] = []
    for item in items:
        if item.score_reason:
            lines.append(f"- **{_clip(item.title, 60)}**: {item.score_reason}")
    return lines


def _section(title: str, value: Any) -> list[str]:
    lines = [f"### {title}", ""]
    if isinstance(value, dict):
        for key, v in value.items():
            if isinstance(v, list):
                lines.append(f"- **{key}:** {', '.join(str(x) for x in v)}")
            else:
                lines.append(f"- **{key}:** {v}")
    elif isinstance(value, list):
        for v in value:
            if isinstance(v, dict):
                lines.append("- " + "; ".join(f"**{k}:** {x}" for k, x in v.items()))
            else:
                lines.append(f"- {v}")
    else:
        lines.append(str(value))
    lines.append("")
    return lines


def _heading(key: str) -> str:
    out = "".join(" " + c.lower() if c.isupper() else c for c in key)
    return out[:1].upper() + out[1:]


def _generation(result: GenerationResult) -> list[str]:
    if result.text:
        return [result.text, ""]
    lines: list[str] = []
    if isinstance(result.data, dict):
        for key, value in result.data.items():
            if value in ("", [], {}, None):
                continue
            lines.extend(_section(_heading(key), value))
    return lines


def render_markdown(response: PipelineResponse) -> str:
    lines: list[str] = [f"# {_TITLES.get(response.kind, response.kind.title())}", ""]
    if response.used_fallback:
        lines += [_FALLBACK_NOTE, ""]

    if response.generation is not None:
        lines.extend(_generation(response.generation))

    if response.items:
        if response.kind == "interview_prep":
            lines += ["## Interview Videos", ""]
            lines += [f"- [{_clip(v.title, 80)}]({v.url}) ({v.company})" for v in response.items]
            lines.append("")
        else:
            lines.append(f"**{len(response.items)}** shown of **{response.total}** found")
            lines.append("")
            lines.extend(_items_table(response.items))
            lines.append("")
            reasons = _reasons(response.items)
            if reasons:
                lines += ["## Why These Matches", ""] + reasons + [""]
    elif response.kind in ("search", "recommend"):
        lines += ["_No jobs found._", ""]

    return "\n".join(lines).rstrip() + "\n"
