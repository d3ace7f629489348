"""Deterministic offline substitutes for every provider kind.

Everything here is pure: no I/O, no clock, no randomness. The same request
always produces the same output, and nothing raises for well-formed
requests (the adapter has validated them before any fallback runs).
"""
from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote_plus

from jobassist.log import get_logger
from jobassist.models import (
    CalendarReminder,
    ExperienceLevel,
    GenerationRequest,
    GenerationResult,
    ProviderKind,
    Query,
    ResultItem,
)
from jobassist.providers.google_calendar import build_event

log = get_logger(__name__)

# Display-cased vocabulary for keyword skill detection in résumé text.
SKILL_VOCABULARY: tuple[str, ...] = (
    "JavaScript", "TypeScript", "React", "Node.js", "Angular", "Vue.js",
    "HTML", "CSS", "Python", "Java", "C#", "C++", "Ruby", "PHP",
    "SQL", "NoSQL", "MongoDB", "PostgreSQL", "MySQL", "Redis",
    "Docker", "Kubernetes", "AWS", "GCP", "Azure", "Terraform", "Ansible",
    "Jenkins", "Git", "Linux", "CI/CD", "REST", "GraphQL", "Microservices",
    "Agile", "Scrum", "JIRA", "Excel", "Power BI", "Tableau", "Salesforce",
    "Machine Learning", "Deep Learning", "NLP", "Data Science", "Pandas",
    "TensorFlow", "PyTorch", "Spark", "Kafka", "Elasticsearch",
    "Figma", "UI/UX", "Communication", "Leadership", "Project Management",
)

# Core skills per role family; first matching key wins, "software" is the default.
ROLE_SKILLS: dict[str, tuple[str, ...]] = {
    "frontend": ("HTML", "CSS", "JavaScript", "TypeScript", "React", "Testing", "Accessibility"),
    "front end": ("HTML", "CSS", "JavaScript", "TypeScript", "React", "Testing", "Accessibility"),
    "backend": ("Python", "SQL", "REST", "Docker", "System Design", "Testing", "Git"),
    "back end": ("Python", "SQL", "REST", "Docker", "System Design", "Testing", "Git"),
    "full stack": ("JavaScript", "React", "Node.js", "SQL", "REST", "Docker", "Git"),
    "data scien": ("Python", "SQL", "Statistics", "Pandas", "Machine Learning", "Data Visualization"),
    "data analyst": ("SQL", "Excel", "Python", "Tableau", "Statistics", "Communication"),
    "data engineer": ("Python", "SQL", "Spark", "Kafka", "Airflow", "AWS"),
    "machine learning": ("Python", "PyTorch", "TensorFlow", "Statistics", "MLOps", "SQL"),
    "devops": ("Linux", "Docker", "Kubernetes", "Terraform", "CI/CD", "AWS", "Monitoring"),
    "sre": ("Linux", "Kubernetes", "Monitoring", "Incident Response", "Python", "AWS"),
    "mobile": ("Swift", "Kotlin", "React Native", "REST", "Testing", "Git"),
    "product manager": ("Roadmapping", "Stakeholder Management", "Analytics", "Agile", "Communication"),
    "designer": ("Figma", "UI/UX", "Prototyping", "User Research", "Design Systems"),
    "qa": ("Test Automation", "Selenium", "API Testing", "CI/CD", "Bug Tracking"),
    "security": ("Network Security", "Linux", "Threat Modeling", "IAM", "Incident Response"),
    "software": ("Data Structures", "Algorithms", "Git", "Testing", "SQL", "System Design"),
}

_SAMPLE_EMPLOYERS: tuple[tuple[str, str, str], ...] = (
    ("Northwind Labs", "", "Build and ship product features with a cross-functional team."),
    ("Contoso Digital", "Senior ", "Own technical design and mentor engineers on the team."),
    ("Fabrikam Cloud", "", "Fully remote role on a distributed platform team."),
)

_TITLE_WORDS = (
    "engineer", "developer", "manager", "analyst", "designer", "consultant",
    "lead", "director", "specialist", "architect", "scientist", "administrator",
)

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
_PHONE_RE = re.compile(r"\+?\d[\d\s\-().]{7,15}\d")
_YEARS_RE = re.compile(r"(\d{1,2})\+?\s*(?:years?|yrs?)", re.IGNORECASE)


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-") or "general"


def contains_term(text: str, term: str) -> bool:
    """Case-insensitive whole-term match (``Java`` does not match ``JavaScript``)."""
    pattern = r"(?<![a-z0-9])" + re.escape(term.lower()) + r"(?![a-z0-9+#])"
    return re.search(pattern, text.lower()) is not None


def skills_for_role(title: str) -> tuple[str, ...]:
    low = (title or "").lower()
    for key, skills in ROLE_SKILLS.items():
        if key in low:
            return skills
    return ROLE_SKILLS["software"]


def split_skills(value: str) -> list[str]:
    return [s.strip() for s in (value or "").split(",") if s.strip()]


def level_from_years(years: int) -> ExperienceLevel:
    if years >= 12:
        return ExperienceLevel.DIRECTOR
    if years >= 7:
        return ExperienceLevel.SENIOR
    if years >= 3:
        return ExperienceLevel.MID
    if years >= 1:
        return ExperienceLevel.ASSOCIATE
    return ExperienceLevel.ENTRY


class FallbackGenerator:
    def fallback(self, kind: ProviderKind, request: Any) -> Any:
        kind = ProviderKind(kind)
        log.info("Using offline fallback for %s", kind.value)
        if kind == ProviderKind.JOB_SEARCH:
            return self.jobs(request)
        if kind == ProviderKind.VIDEO_SEARCH:
            return self.videos(request)
        if kind == ProviderKind.RESUME_PARSE:
            return self.resume(request)
        if kind == ProviderKind.CALENDAR_WRITE:
            return self.calendar(request)
        return self.generation(request)

    # ── job-search ───────────────────────────────────────────────────────

    def jobs(self, query: Query) -> list[ResultItem]:
        keywords = " ".join(query.keywords.split()) or "Software Developer"
        title = keywords.title() if keywords.islower() else keywords
        location = query.location or "Remote"
        skills = list(skills_for_role(keywords)[:4])
        slug = slugify(keywords)

        items: list[ResultItem] = []
        for n, (company, prefix, blurb) in enumerate(_SAMPLE_EMPLOYERS, 1):
            remote = n == len(_SAMPLE_EMPLOYERS)
            items.append(
                ResultItem(
                    id=f"fallback:{slug}:{n}",
                    title=f"{prefix}{title}",
                    company=company,
                    location="Remote" if remote else location,
                    description=f"{blurb} Skills: {', '.join(skills)}.",
                    url=f"https://www.google.com/search?q={quote_plus(keywords + ' jobs ' + location)}",
                    required_skills=skills,
                    source="fallback",
                )
            )
        return items[: query.results_per_page]

    # ── video-search ─────────────────────────────────────────────────────

    def videos(self, query: Query) -> list[ResultItem]:
        q = " ".join(query.keywords.split())
        templates = (
            (f"{q} - Complete Guide", "Career Success", "", f"Comprehensive guide covering {q} with practical tips."),
            (f"Master {q} - Expert Tips", "Interview Pro", " tips", f"Professional advice and strategies for {q}."),
            (f"{q} - Step by Step", "Tech Career Hub", " tutorial", f"Walkthrough of {q} with real examples."),
        )
        return [
            ResultItem(
                id=f"fallback-video:{slugify(q)}:{n}",
                title=title,
                company=channel,
                description=description,
                url=f"https://www.youtube.com/results?search_query={quote_plus(q + suffix)}",
                source="fallback",
                raw={"query": q},
            )
            for n, (title, channel, suffix, description) in enumerate(templates, 1)
        ][: query.results_per_page]

    # ── resume-parse ─────────────────────────────────────────────────────

    def resume(self, request: GenerationRequest) -> GenerationResult:
        """Keyword-matched skills plus placeholder personal info.

        Skills are only what the text actually mentions; an empty list is
        returned rather than a canned default set.
        """
        text = request.context.get("resume_text", "")
        lines = [ln.strip() for ln in text.strip().splitlines() if ln.strip()]

        name = lines[0] if lines and len(lines[0]) <= 60 and not _EMAIL_RE.search(lines[0]) else "Resume User"
        email = _EMAIL_RE.search(text)
        phone = _PHONE_RE.search(text)
        years = max((int(m.group(1)) for m in _YEARS_RE.finditer(text)), default=0)

        title = ""
        for line in lines[1:20]:
            if 3 < len(line) < 80 and not _EMAIL_RE.search(line) and not _PHONE_RE.search(line):
                if any(w in line.lower() for w in _TITLE_WORDS):
                    title = line
                    break

        data = {
            "name": name,
            "email": email.group(0) if email else "Not specified",
            "phone": phone.group(0).strip() if phone else "Not specified",
            "location": "Not specified",
            "title": title,
            "skills": [s for s in SKILL_VOCABULARY if contains_term(text, s)],
            "experienceLevel": level_from_years(years).value,
            "yearsExperience": years,
            "suggestedJobTitles": [title] if title else [],
            "education": [],
            "summary": "",
        }
        return GenerationResult(kind="resume", data=data, using_fallback=True)

    # ── calendar-write ───────────────────────────────────────────────────

    def calendar(self, reminder: CalendarReminder) -> GenerationResult:
        return GenerationResult(
            kind="calendar",
            data={"event": build_event(reminder), "created": False},
            using_fallback=True,
        )

    # ── ai-generate ──────────────────────────────────────────────────────

    def generation(self, request: GenerationRequest) -> GenerationResult:
        builders = {
            "interview_prep": self.interview_prep,
            "roadmap": self.roadmap,
            "skill_gap": self.skill_gap,
        }
        builder = builders.get(request.generation, self.roadmap)
        return builder(request)

    def interview_prep(self, request: GenerationRequest) -> GenerationResult:
        title = request.subject_title
        company = request.context.get("company") or "the company"
        skills = split_skills(request.context.get("skills", "")) or ["Communication", "Problem Solving", "Teamwork"]

        data = {
            "companyResearch": {
                "keyFacts": [
                    f"Research {company}'s mission and values",
                    "Look up recent company news",
                    "Understand their products/services",
                ],
                "recentNews": [
                    f"Check {company}'s latest press releases",
                    "Review their social media updates",
                ],
                "culture": f"Research {company}'s work culture and employee reviews",
                "values": ["Innovation", "Teamwork", "Excellence", "Customer Focus"],
            },
            "technicalQuestions": [
                f"What experience do you have with {title} responsibilities?",
                "Describe a challenging technical problem you solved recently",
                "How do you approach debugging and troubleshooting?",
                "What development methodologies are you familiar with?",
                "How do you ensure quality in your work?",
                "Walk me through your typical workflow",
            ] + [f"How have you used {s} in a recent project?" for s in skills[:3]],
            "behavioralQuestions": [
                "Tell me about yourself and your career journey",
                f"Why are you interested in this {title} position at {company}?",
                "Describe a time when you had to work under pressure",
                "How do you handle conflicts with team members?",
                "Tell me about a time you had to learn something new quickly",
                "Tell me about a mistake you made and how you handled it",
            ],
            "questionsToAsk": [
                "What does a typical day look like for this role?",
                "What are the biggest challenges facing the team right now?",
                "How do you measure success in this position?",
                "What opportunities are there for professional development?",
                "What are the next steps in the interview process?",
            ],
            "technicalTopics": skills + ["Problem Solving", "System Design", "Best Practices"],
            "skillsToHighlight": skills + ["Leadership", "Communication", "Adaptability"],
            "mockScenarios": [
                "Technical problem-solving session",
                "System design discussion",
                "Code review simulation",
                "Project presentation",
            ],
            "preparationChecklist": [
                f"Research {company} thoroughly",
                "Review the job description and requirements",
                "Prepare specific examples using the STAR method",
                "Practice common interview questions out loud",
                "Prepare thoughtful questions to ask the interviewer",
            ],
            "redFlags": [
                "Vague job descriptions or responsibilities",
                "High employee turnover",
                "Poor communication during the interview process",
                "Unrealistic expectations or timelines",
            ],
            "timeline": {
                "week1": "Company research and job description analysis",
                "week2": "Technical skills review and practice questions",
                "week3": "Mock interviews and behavioral question preparation",
                "final": "Final review, confidence building, and logistics planning",
            },
            "starExamples": [
                {
                    "situation": "Working on a critical project with a tight deadline",
                    "task": "Deliver a high-quality solution within the time constraint",
                    "action": "Organized the team, prioritized features, cut scope deliberately",
                    "result": "Delivered on time and met the agreed quality bar",
                },
                {
                    "situation": "Disagreement with a teammate about a technical approach",
                    "task": "Resolve the conflict while keeping the team aligned",
                    "action": "Listened to their concerns, compared options with data, agreed a compromise",
                    "result": "Better solution and improved collaboration",
                },
            ],
        }
        return GenerationResult(kind="interview_prep", data=data, using_fallback=True)

    def roadmap(self, request: GenerationRequest) -> GenerationResult:
        title = request.subject_title
        level = request.context.get("experience_level") or "beginner"
        skills = request.context.get("skills") or "Not specified"
        text = f"""Career Roadmap: {title}

Overview
A practical plan to become a {title} from {level} level.

Prerequisites
- Consistent practice schedule (5-10 hrs/week)
- Basic computer literacy

Learning Path
Phase 1 (0-3 months): Foundations
- Learn fundamentals used by {title}
- Complete 3 small projects

Phase 2 (3-6 months): Intermediate
- Learn popular tools/frameworks
- Build 1-2 medium projects and document them well

Phase 3 (6-12 months): Advanced
- Deep-dive into 2-3 specialization areas
- Contribute to open-source or team projects

Phase 4 (12+ months): Specialization
- Pick a niche aligned to {title}
- Build a capstone project and prepare for interviews

Portfolio
- 3-5 projects with clear READMEs and screenshots

Current Skills: {skills}
Next Steps
- Set weekly goals, track progress, iterate projects"""
        return GenerationResult(kind="roadmap", text=text, using_fallback=True)

    def skill_gap(self, request: GenerationRequest) -> GenerationResult:
        title = request.subject_title
        current = split_skills(request.context.get("skills", ""))
        experience = request.context.get("experience") or "Not specified"
        required = skills_for_role(title)
        have = [s for s in required if any(s.lower() == c.lower() for c in current)]
        missing = [s for s in required if s not in have]

        lines = [
            f"Skill Gap Analysis for {title}",
            "",
            f"Current Skills: {', '.join(current) or 'None listed'}",
            f"Experience: {experience}",
            "",
            f"Relevant skills you have: {', '.join(have) or 'None yet'}",
            f"Skills to learn: {', '.join(missing) or 'None, focus on depth'}",
            "",
            "Suggested Priorities",
        ]
        if missing:
            lines.append(f"1) High priority: {', '.join(missing[:2])}")
            if missing[2:]:
                lines.append(f"2) Medium priority: {', '.join(missing[2:4])}")
            if missing[4:]:
                lines.append(f"3) Nice to have: {', '.join(missing[4:])}")
        else:
            lines.append(f"1) Deepen core fundamentals for {title}")
        lines += [
            "",
            "Focus Areas",
            "- Fundamentals, tools, two targeted portfolio projects, mock interviews",
        ]
        return GenerationResult(kind="skill_gap", text="\n".join(lines), using_fallback=True)
