"""Command-line entry point: ``python -m jobassist <command> [args]``."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from jobassist.config import load_profile_data, load_settings
from jobassist.errors import JobAssistError
from jobassist.log import configure, get_logger
from jobassist.models import GenerationRequest
from jobassist.pipeline import JobAssistant, profile_context
from jobassist.profile import build_profile
from jobassist.report import render_markdown
from jobassist.resume_text import extract_text

log = get_logger(__name__)


def _add_profile_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--skills", help="comma-separated skills (overrides the profile file)")
    p.add_argument("--level", dest="experience_level", help="entry, associate, mid, senior, director or executive")
    p.add_argument("--location")
    p.add_argument("--remote", action="store_true", default=None, help="include remote-only sources")
    p.add_argument("--resume", type=Path, help="PDF, DOCX or TXT résumé to build the profile from")
    p.add_argument("--profile-file", type=Path, help="YAML profile (default: config/profile.yaml)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobassist", description="AI-assisted job search")
    parser.add_argument("--markdown", action="store_true", help="print Markdown instead of JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    parser.add_argument("--timeout", type=float, help="abort the request after this many seconds")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="search jobs and rank them against the profile")
    p.add_argument("keywords", nargs="?")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--per-page", type=int, dest="results_per_page")
    _add_profile_args(p)

    p = sub.add_parser("recommend", help="top jobs across up to three title variants")
    p.add_argument("--title")
    _add_profile_args(p)

    p = sub.add_parser("prep", help="interview preparation for a role at a company")
    p.add_argument("title")
    p.add_argument("company")
    p.add_argument("--description", default="", help="job description text")
    _add_profile_args(p)

    for name, help_text in (("roadmap", "career roadmap for a target role"),
                            ("skill-gap", "skill gap analysis for a target role")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("title")
        _add_profile_args(p)

    p = sub.add_parser("parse-resume", help="extract structured data from a résumé file")
    p.add_argument("path", type=Path)
    return parser


def _resolve_profile(assistant: JobAssistant, args: argparse.Namespace):
    resume: dict[str, Any] | None = None
    if args.resume:
        parsed = assistant.parse_resume(extract_text(args.resume), timeout=args.timeout)
        resume = parsed.generation.data
    params = {
        "skills": args.skills,
        "experience_level": args.experience_level,
        "location": args.location,
        "remote": args.remote,
        "title": getattr(args, "title", None),
    }
    return build_profile(params, resume=resume, defaults=load_profile_data(args.profile_file))


def run(args: argparse.Namespace, assistant: JobAssistant):
    if args.command == "parse-resume":
        return assistant.parse_resume(extract_text(args.path), timeout=args.timeout)

    profile = _resolve_profile(assistant, args)
    if args.command == "search":
        return assistant.search(
            profile,
            keywords=args.keywords,
            page=args.page,
            results_per_page=args.results_per_page,
            timeout=args.timeout,
        )
    if args.command == "recommend":
        return assistant.recommend(profile, timeout=args.timeout)

    context = profile_context(profile)
    if args.command == "prep":
        context.update(company=args.company, job_description=args.description)
        return assistant.interview_prep(GenerationRequest(args.title, context), timeout=args.timeout)
    if args.command == "roadmap":
        return assistant.roadmap(GenerationRequest(args.title, context), timeout=args.timeout)
    return assistant.skill_gap(GenerationRequest(args.title, context), timeout=args.timeout)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        configure(level="DEBUG")
    assistant = JobAssistant(load_settings())
    try:
        response = run(args, assistant)
    except JobAssistError as exc:
        log.error("%s failed: %s", args.command, exc)
        return 1

    if args.markdown:
        sys.stdout.write(render_markdown(response))
    else:
        json.dump(response.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
