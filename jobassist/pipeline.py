"""
Job-search assistant pipeline.

Runs: build query → fan-out provider calls → merge → score / generate → truncate.

Every provider failure is logged and replaced by an offline fallback; only
``InvalidRequest``, ``AllSourcesExhausted`` and ``PipelineTimeout`` reach
the caller.
"""
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Any, Callable

from jobassist.adapter import ProviderAdapter, validate_request
from jobassist.config import Settings, load_settings
from jobassist.errors import InvalidRequest, PipelineTimeout, ProviderError, ProviderUnreachable
from jobassist.fallback import FallbackGenerator
from jobassist.log import get_logger
from jobassist.merger import merge
from jobassist.models import (
    CalendarReminder,
    GenerationRequest,
    GenerationResult,
    PipelineResponse,
    Profile,
    ProviderKind,
    Query,
    ResultItem,
)
from jobassist.profile import title_variants
from jobassist.prompts import interview_prep_prompt, resume_prompt, roadmap_prompt, skill_gap_prompt
from jobassist.retry import Backoff, call_with_backoff
from jobassist.scorer import RelevanceScorer

log = get_logger(__name__)

VIDEOS_PER_QUERY = 3
MAX_VIDEO_QUERIES = 3


def profile_context(profile: Profile) -> dict[str, str]:
    """Generation context (skills, level, experience) taken from a profile."""
    return {
        "skills": ", ".join(profile.skills),
        "experience_level": profile.experience_level.value,
        "experience": profile.summary or f"{profile.experience_level.value} level",
        "resume_summary": profile.summary,
    }


def video_queries(title: str, skills: list[str] | tuple[str, ...] = ()) -> list[str]:
    queries = [
        f"{title} interview questions",
        f"{title} interview tips",
        f"{title} technical interview",
    ] + [f"{s} interview questions" for s in skills]
    return queries[:MAX_VIDEO_QUERIES]


class JobAssistant:
    """Per-request pipelines over a shared ``ProviderAdapter``.

    The adapter's circuit breakers are the only state shared between
    calls; everything else is built per request and discarded.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        adapter: ProviderAdapter | None = None,
        fallback: FallbackGenerator | None = None,
        scorer: RelevanceScorer | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or getattr(adapter, "settings", None) or load_settings()
        self.adapter = adapter or ProviderAdapter(self.settings)
        self.fallback = fallback or FallbackGenerator()
        self.scorer = scorer or RelevanceScorer(self.adapter)
        self._sleep = sleep
        self._clock = clock

    # ── provider calls ───────────────────────────────────────────────────

    def _call(self, kind: ProviderKind, request: Any, provider: str | None = None) -> Any:
        attempts = self.settings.retry_attempts
        if attempts <= 1:
            return self.adapter.call(kind, request, provider)
        return call_with_backoff(
            self.adapter.call,
            kind,
            request,
            provider,
            policy=Backoff(attempts=attempts, base_delay=self.settings.retry_base_delay),
            retryable=(ProviderUnreachable,),
            sleep=self._sleep,
        )

    def _attempt(self, kind: ProviderKind, request: Any, provider: str | None = None) -> Any | None:
        """Result of one provider call, or None after logging the failure."""
        try:
            return self._call(kind, request, provider)
        except ProviderError as exc:
            log.warning("%s call failed: %s", kind.value, exc)
            return None

    def _gather(self, tasks: list[Callable[[], Any]], deadline: float | None = None) -> list[Any]:
        """Run *tasks* concurrently; results come back in submission order."""
        if not tasks:
            return []
        if deadline is None and len(tasks) == 1:
            return [tasks[0]()]

        workers = max(1, min(self.settings.max_fanout, len(tasks)))
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="jobassist")
        try:
            futures = [pool.submit(task) for task in tasks]
            timeout = None if deadline is None else max(0.0, deadline - self._clock())
            _, pending = wait(futures, timeout=timeout)
            if pending:
                raise PipelineTimeout(
                    f"request timed out with {len(pending)} of {len(futures)} call(s) outstanding"
                )
            return [f.result() for f in futures]
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def _deadline(self, timeout: float | None) -> float | None:
        if timeout is None:
            return None
        if timeout <= 0:
            raise InvalidRequest("timeout must be positive")
        return self._clock() + timeout

    def _fan_out(
        self,
        kind: ProviderKind,
        queries: list[Query],
        deadline: float | None,
    ) -> tuple[list[ResultItem], bool]:
        """Query every accepting provider for each query; fall back per query.

        A query falls back only when none of its provider calls succeeded.
        """
        plan: list[tuple[int, str]] = []
        for qi, query in enumerate(queries):
            for name in self.adapter.providers_for(kind, query):
                plan.append((qi, name))

        results = self._gather(
            [lambda q=queries[qi], n=name: self._attempt(kind, q, n) for qi, name in plan],
            deadline,
        )

        per_query: list[list[list[ResultItem]]] = [[] for _ in queries]
        for (qi, _), result in zip(plan, results):
            if result is not None:
                per_query[qi].append(result)

        batches: list[list[ResultItem]] = []
        used_fallback = False
        for query, found in zip(queries, per_query):
            if found:
                batches.extend(found)
                continue
            log.warning("No %s provider answered %r, using fallback", kind.value, query.keywords)
            batches.append(self.fallback.fallback(kind, query))
            used_fallback = True
        return merge(batches), used_fallback

    def _generate(self, kind: ProviderKind, request: GenerationRequest) -> GenerationResult:
        out = self._attempt(kind, request)
        if out is None:
            return self.fallback.fallback(kind, request)
        if isinstance(out, str):
            return GenerationResult(kind=request.generation, text=out)
        return GenerationResult(kind=request.generation, data=out)

    def _rank(
        self,
        items: list[ResultItem],
        profile: Profile,
        limit: int,
        deadline: float | None,
    ) -> tuple[list[ResultItem], bool]:
        [outcome] = self._gather([lambda: self.scorer.score(items, profile)], deadline)
        # truncate only after scoring so the best items survive
        return outcome.items[:limit], outcome.used_fallback

    # ── job search ───────────────────────────────────────────────────────

    def build_query(
        self,
        profile: Profile,
        keywords: str | None = None,
        location: str | None = None,
        page: int = 1,
        results_per_page: int | None = None,
        remote: bool | None = None,
    ) -> Query:
        query = Query(
            keywords=(keywords if keywords is not None else profile.preferred_title).strip(),
            location=(location if location is not None else profile.location).strip(),
            page=page,
            results_per_page=results_per_page or self.settings.page_size,
            filters={
                "remote": profile.remote_allowed if remote is None else remote,
                "experience_level": profile.experience_level.value,
            },
        )
        validate_request(ProviderKind.JOB_SEARCH, query)
        return query

    def search(
        self,
        profile: Profile,
        keywords: str | None = None,
        location: str | None = None,
        page: int = 1,
        results_per_page: int | None = None,
        remote: bool | None = None,
        timeout: float | None = None,
    ) -> PipelineResponse:
        query = self.build_query(profile, keywords, location, page, results_per_page, remote)
        deadline = self._deadline(timeout)
        log.info("Searching jobs: %r in %r (page %d)", query.keywords, query.location, query.page)

        items, search_fallback = self._fan_out(ProviderKind.JOB_SEARCH, [query], deadline)
        ranked, score_fallback = self._rank(items, profile, query.results_per_page, deadline)
        log.info("Search complete: %d found, %d returned", len(items), len(ranked))
        return PipelineResponse(
            kind="search",
            items=ranked,
            used_fallback=search_fallback or score_fallback,
            total=len(items),
            page=query.page,
        )

    def recommend(self, profile: Profile, timeout: float | None = None) -> PipelineResponse:
        """Search up to three title variants for *profile* and return the top matches."""
        variants = title_variants(profile, self.settings.max_title_variants)
        if not variants:
            raise InvalidRequest("profile has no job title to recommend from")
        deadline = self._deadline(timeout)
        queries = [self.build_query(profile, keywords=v) for v in variants]
        log.info("Recommending jobs for %d title variant(s): %s", len(queries), ", ".join(variants))

        items, search_fallback = self._fan_out(ProviderKind.JOB_SEARCH, queries, deadline)
        ranked, score_fallback = self._rank(items, profile, self.settings.page_size, deadline)
        log.info("Recommendations: %d unique jobs, %d returned", len(items), len(ranked))
        return PipelineResponse(
            kind="recommend",
            items=ranked,
            used_fallback=search_fallback or score_fallback,
            total=len(items),
        )

    # ── generation ───────────────────────────────────────────────────────

    def interview_prep(self, request: GenerationRequest, timeout: float | None = None) -> PipelineResponse:
        """Interview preparation plus up to ``max_videos`` interview videos."""
        title = (request.subject_title or "").strip()
        company = (request.context.get("company") or "").strip()
        if not title or not company:
            raise InvalidRequest("interview prep requires a job title and a company name")
        deadline = self._deadline(timeout)

        request = replace(
            request,
            generation="interview_prep",
            prompt=interview_prep_prompt(title, request.context),
        )
        skills = [s.strip() for s in request.context.get("skills", "").split(",") if s.strip()]
        queries = [
            Query(keywords=q, results_per_page=VIDEOS_PER_QUERY) for q in video_queries(title, skills)
        ]

        tasks: list[Callable[[], Any]] = [lambda: self._generate(ProviderKind.AI_GENERATE, request)]
        tasks.append(lambda: self._fan_out(ProviderKind.VIDEO_SEARCH, queries, None))
        generation, (videos, video_fallback) = self._gather(tasks, deadline)

        videos = videos[: self.settings.max_videos]
        log.info(
            "Interview prep for %s at %s: fallback=%s, %d video(s)",
            title, company, generation.using_fallback, len(videos),
        )
        return PipelineResponse(
            kind="interview_prep",
            items=videos,
            generation=generation,
            used_fallback=generation.using_fallback or video_fallback,
            total=len(videos),
        )

    def _text_generation(
        self,
        kind: str,
        request: GenerationRequest,
        prompt_fn: Callable[[str, dict[str, str]], str],
        timeout: float | None,
    ) -> PipelineResponse:
        title = (request.subject_title or "").strip()
        if not title:
            raise InvalidRequest(f"{kind} requires a target job title")
        deadline = self._deadline(timeout)
        request = replace(request, generation=kind, prompt=prompt_fn(title, request.context))
        [generation] = self._gather(
            [lambda: self._generate(ProviderKind.AI_GENERATE, request)], deadline
        )
        log.info("%s for %s: fallback=%s", kind, title, generation.using_fallback)
        return PipelineResponse(kind=kind, generation=generation, used_fallback=generation.using_fallback)

    def roadmap(self, request: GenerationRequest, timeout: float | None = None) -> PipelineResponse:
        return self._text_generation("roadmap", request, roadmap_prompt, timeout)

    def skill_gap(self, request: GenerationRequest, timeout: float | None = None) -> PipelineResponse:
        return self._text_generation("skill_gap", request, skill_gap_prompt, timeout)

    def parse_resume(self, text: str, timeout: float | None = None) -> PipelineResponse:
        """Structured résumé data (``ParsedResume`` shape) from plain text."""
        if not text or not text.strip():
            raise InvalidRequest("résumé text is empty")
        deadline = self._deadline(timeout)
        request = GenerationRequest(
            subject_title="resume",
            context={"resume_text": text},
            generation="resume",
            prompt=resume_prompt(text),
        )
        [generation] = self._gather(
            [lambda: self._generate(ProviderKind.RESUME_PARSE, request)], deadline
        )
        log.info(
            "Parsed résumé: %d skill(s), fallback=%s",
            len((generation.data or {}).get("skills", [])), generation.using_fallback,
        )
        return PipelineResponse(kind="resume", generation=generation, used_fallback=generation.using_fallback)

    # ── calendar ─────────────────────────────────────────────────────────

    def create_interview_reminder(self, reminder: CalendarReminder) -> PipelineResponse:
        """Write the reminder to the calendar, or return the unsent event payload."""
        validate_request(ProviderKind.CALENDAR_WRITE, reminder)
        out = self._attempt(ProviderKind.CALENDAR_WRITE, reminder)
        if out is None:
            generation = self.fallback.fallback(ProviderKind.CALENDAR_WRITE, reminder)
        else:
            generation = GenerationResult(kind="calendar", data=out)
        log.info(
            "%s reminder for %s at %s: created=%s",
            reminder.reminder_type, reminder.job_title, reminder.company, not generation.using_fallback,
        )
        return PipelineResponse(kind="calendar", generation=generation, used_fallback=generation.using_fallback)
