"""Prompt builders for the AI provider."""
from __future__ import annotations

from jobassist.models import Profile, ResultItem

_RANKING_PROMPT = """\
Rank these {count} jobs by relevance to the candidate profile below.

Candidate profile:
- Skills: {skills}
- Experience level: {level}
- Preferred job title: {title}
- Preferred location: {location}
- Open to remote: {remote}

Jobs:
{jobs}

Return ONLY a JSON array, one object per job you rank, with:
  "itemIndex": the job's number from the list above
  "score"    : integer 0-100
  "reason"   : one short sentence

Example: [{{"itemIndex": 1, "score": 95, "reason": "Strong skill and level match"}}]

Weigh: skill match 40%, experience level 25%, location 20%, company 15%.
"""

_INTERVIEW_PREP_PROMPT = """\
Generate interview preparation for a {title} position at {company}.
{job_description}{candidate}
Return ONLY valid JSON with exactly these keys:
{{
  "companyResearch": {{"keyFacts": [], "recentNews": [], "culture": "", "values": []}},
  "technicalQuestions": [],
  "behavioralQuestions": [],
  "questionsToAsk": [],
  "technicalTopics": [],
  "skillsToHighlight": [],
  "mockScenarios": [],
  "preparationChecklist": [],
  "redFlags": [],
  "timeline": {{"week1": "", "week2": "", "week3": "", "final": ""}},
  "starExamples": [{{"situation": "", "task": "", "action": "", "result": ""}}]
}}

Every list must be non-empty. Tailor everything to the {title} role at {company}.
"""

_ROADMAP_PROMPT = """\
Create a career roadmap for becoming a {title}.

Current context:
- Experience level: {level}
- Current skills: {skills}

Cover, in clear sections:
1. Overview of the role
2. Prerequisites
3. Learning path in four phases: Foundation (0-3 months), Intermediate
   (3-6 months), Advanced (6-12 months), Specialization (12+ months); for
   each: key skills, resources, practical projects, time commitment
4. Career progression and salary expectations
5. Industry trends
6. Networking and community
7. Portfolio requirements

Make it practical and achievable for someone at the {level} level.
"""

_SKILL_GAP_PROMPT = """\
Analyze the skill gap for someone who wants to become a {title}.

Current profile:
- Skills: {skills}
- Experience: {experience}

Provide:
1. Skills assessment: relevant skills held, missing skills, skills to improve
2. Priority learning plan: high, medium and nice-to-have priorities
3. Learning resources: free, paid, hands-on
4. Timeline estimate and milestones; when to start applying
5. Portfolio projects that demonstrate the missing skills

Be specific and actionable.
"""

_RESUME_PROMPT = """\
You are a resume parser. Extract structured data from the resume text below.
Return ONLY valid JSON with these exact keys (empty string or empty list if unknown):

{{
  "name": "", "email": "", "phone": "", "location": "",
  "title": "Current or most recent job title",
  "skills": ["skill1", "skill2"],
  "experienceLevel": "entry | associate | mid | senior | director | executive",
  "yearsExperience": 0,
  "suggestedJobTitles": ["Title 1", "Title 2", "Title 3"],
  "education": ["Degree, Institution, Year"],
  "summary": "2-3 sentence professional summary"
}}

"suggestedJobTitles" should be 3-5 realistic titles this person should apply to.

Resume text:
{resume_text}
"""


def _or(value: str, default: str) -> str:
    return value if value and value.strip() else default


def ranking_prompt(items: list[ResultItem], profile: Profile) -> str:
    jobs = []
    for i, item in enumerate(items, 1):
        skills = ", ".join(item.required_skills) or "Not specified"
        jobs.append(
            f"{i}. {item.title} at {_or(item.company, 'Unknown company')}\n"
            f"   Location: {_or(item.location, 'Not specified')}\n"
            f"   Skills: {skills}\n"
            f"   Description: {item.description[:200]}"
        )
    return _RANKING_PROMPT.format(
        count=len(items),
        skills=", ".join(profile.skills) or "Not specified",
        level=profile.experience_level.value,
        title=_or(profile.preferred_title, "Not specified"),
        location=_or(profile.location, "Not specified"),
        remote="yes" if profile.remote_allowed else "no",
        jobs="\n".join(jobs),
    )


def interview_prep_prompt(title: str, context: dict[str, str]) -> str:
    description = context.get("job_description", "")
    candidate = ""
    if context.get("skills") or context.get("resume_summary"):
        candidate = (
            "\nCandidate profile:\n"
            f"- Skills: {_or(context.get('skills', ''), 'Not specified')}\n"
            f"- Experience: {_or(context.get('experience', ''), 'Not specified')}\n"
            f"- Summary: {_or(context.get('resume_summary', ''), 'Not specified')}\n"
        )
    return _INTERVIEW_PREP_PROMPT.format(
        title=title,
        company=context.get("company", ""),
        job_description=f"\nJob description: {description[:3000]}\n" if description else "",
        candidate=candidate,
    )


def roadmap_prompt(title: str, context: dict[str, str]) -> str:
    return _ROADMAP_PROMPT.format(
        title=title,
        level=_or(context.get("experience_level", ""), "beginner"),
        skills=_or(context.get("skills", ""), "None specified"),
    )


def skill_gap_prompt(title: str, context: dict[str, str]) -> str:
    return _SKILL_GAP_PROMPT.format(
        title=title,
        skills=_or(context.get("skills", ""), "None specified"),
        experience=_or(context.get("experience", ""), "No experience specified"),
    )


def resume_prompt(resume_text: str) -> str:
    return _RESUME_PROMPT.format(resume_text=resume_text[:6000])
