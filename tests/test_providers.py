from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from jobassist.config import Settings
from jobassist.errors import (
    InvalidRequest,
    ProviderMalformedResponse,
    ProviderUnconfigured,
    ProviderUnreachable,
)
from jobassist.models import CalendarReminder, GenerationRequest, Query
from jobassist.providers import (
    GoogleCalendarSource,
    JSearchSource,
    LLMProvider,
    RemotiveSource,
    YouTubeSource,
    build_providers,
)
from jobassist.providers.google_calendar import build_event
from jobassist.providers.remotive import search_term


def _response(payload=None, status=200):
    resp = MagicMock(status_code=status)
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


# ── JSearch ──────────────────────────────────────────────────────────────

JSEARCH_HIT = {
    "job_id": "abc123",
    "job_title": "React Developer",
    "employer_name": "Acme",
    "job_city": "Austin",
    "job_state": "TX",
    "job_country": "US",
    "job_is_remote": False,
    "job_description": "Build UIs",
    "job_apply_link": "https://acme.example/jobs/1",
    "job_min_salary": 90000,
    "job_max_salary": 120000,
    "job_posted_at_datetime_utc": "2026-10-01T00:00:00Z",
    "job_required_skills": ["React", "TypeScript"],
}


@pytest.fixture
def jsearch():
    return JSearchSource(Settings(jsearch_api_key="key"))


def test_jsearch_normalizes_items(jsearch):
    with patch("requests.request", return_value=_response({"data": [JSEARCH_HIT]})) as req:
        items = jsearch.fetch(Query("react developer", "Austin", filters={"remote": True}))

    item = items[0]
    assert item.id == "jsearch:abc123"
    assert item.location == "Austin, TX, US"
    assert item.required_skills == ["React", "TypeScript"]
    assert item.salary_min == 90000
    params = req.call_args.kwargs["params"]
    assert params["query"] == "react developer in Austin"
    assert params["work_from_home"] == "true"
    assert req.call_args.kwargs["headers"]["X-RapidAPI-Key"] == "key"


def test_jsearch_scalar_required_skill(jsearch):
    hit = dict(JSEARCH_HIT, job_required_skills="Kubernetes")
    with patch("requests.request", return_value=_response({"data": [hit]})):
        items = jsearch.fetch(Query("sre"))
    assert items[0].required_skills == ["Kubernetes"]


def test_jsearch_id_is_stable_without_job_id(jsearch):
    hit = {k: v for k, v in JSEARCH_HIT.items() if k != "job_id"}
    with patch("requests.request", return_value=_response({"data": [hit, dict(hit)]})):
        items = jsearch.fetch(Query("react"))
    assert items[0].id == items[1].id
    assert items[0].id.startswith("jsearch:")


@pytest.mark.parametrize("resp,error", [
    (_response(status=401), ProviderUnconfigured),
    (_response(status=429), ProviderUnreachable),
    (_response(status=503), ProviderUnreachable),
    (_response(ValueError("not json")), ProviderMalformedResponse),
    (_response({"status": "ok"}), ProviderMalformedResponse),
])
def test_jsearch_failures_are_typed(jsearch, resp, error):
    with patch("requests.request", return_value=resp):
        with pytest.raises(error):
            jsearch.fetch(Query("react"))


def test_jsearch_requires_key():
    assert not JSearchSource(Settings()).configured
    assert JSearchSource(Settings(jsearch_api_key="k")).configured


# ── Remotive ─────────────────────────────────────────────────────────────

def test_remotive_accepts_only_remote_queries():
    source = RemotiveSource(Settings(remotive_enabled=True))
    assert source.accepts(Query("python", filters={"remote": True}))
    assert not source.accepts(Query("python"))


def test_remotive_search_term():
    assert search_term("Senior Python Engineer") == "python"
    assert search_term("Senior Engineer") == "senior"


def test_remotive_normalizes_items():
    payload = {"jobs": [{
        "id": 77, "title": "Backend Engineer", "company_name": "Distributed Co",
        "candidate_required_location": "Worldwide", "url": "https://remotive.com/77",
        "tags": ["python", "django"], "publication_date": "2026-10-01",
    }]}
    with patch("requests.request", return_value=_response(payload)):
        items = RemotiveSource(Settings(remotive_enabled=True)).fetch(Query("python", filters={"remote": True}))
    assert items[0].id == "remotive:77"
    assert items[0].required_skills == ["python", "django"]


# ── YouTube ──────────────────────────────────────────────────────────────

def test_youtube_normalizes_videos():
    payload = {"items": [
        {"id": {"videoId": "v1"}, "snippet": {"title": "Mock interview", "channelTitle": "Prep TV",
                                             "thumbnails": {"high": {"url": "https://img/1"}}}},
        {"id": {"channelId": "c1"}, "snippet": {}},
    ]}
    with patch("requests.request", return_value=_response(payload)) as req:
        videos = YouTubeSource(Settings(youtube_api_key="yt")).fetch(Query("sre interview", results_per_page=3))

    assert [v.id for v in videos] == ["youtube:v1"]
    assert videos[0].company == "Prep TV"
    assert videos[0].url == "https://www.youtube.com/watch?v=v1"
    assert videos[0].raw["thumbnail"] == "https://img/1"
    assert req.call_args.kwargs["params"]["maxResults"] == 3


def test_youtube_skips_hits_of_the_wrong_shape():
    payload = {"items": ["oops", {"id": "v2"}, {"id": {"videoId": "v3"}, "snippet": {"title": "Tips"}}]}
    with patch("requests.request", return_value=_response(payload)):
        videos = YouTubeSource(Settings(youtube_api_key="yt")).fetch(Query("sre interview"))
    assert [v.id for v in videos] == ["youtube:v3"]


# ── Google Calendar ──────────────────────────────────────────────────────

def test_interview_event_is_one_hour_with_reminders():
    event = build_event(CalendarReminder("Engineer", "Acme", "2026-11-03T10:00:00", notes="Bring laptop"))
    assert event["summary"] == "Interview: Engineer at Acme"
    assert event["end"]["dateTime"] == "2026-11-03T11:00:00"
    assert "Bring laptop" in event["description"]
    assert event["reminders"]["useDefault"] is False
    assert len(event["reminders"]["overrides"]) == 3


def test_deadline_event_is_half_an_hour():
    reminder = CalendarReminder("Engineer", "Acme", "2026-11-03T10:00:00Z", reminder_type="deadline",
                                application_url="https://acme.example/apply")
    event = build_event(reminder)
    assert event["summary"].startswith("Application Deadline:")
    assert event["end"]["dateTime"] == "2026-11-03T10:30:00+00:00"
    assert "https://acme.example/apply" in event["description"]


def test_bad_start_is_invalid_request():
    with pytest.raises(InvalidRequest):
        build_event(CalendarReminder("Engineer", "Acme", "soon"))


def test_calendar_posts_with_bearer_token():
    reminder = CalendarReminder("Engineer", "Acme", "2026-11-03T10:00:00", access_token="tok")
    with patch("requests.request", return_value=_response({"id": "evt1"})) as req:
        out = GoogleCalendarSource(Settings()).fetch(reminder)
    assert out == {"event": {"id": "evt1"}, "created": True}
    assert req.call_args.args[0] == "POST"
    assert req.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"


# ── LLM ──────────────────────────────────────────────────────────────────

def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def llm_client():
    with patch("jobassist.providers.llm.OpenAI") as cls:
        yield cls.return_value


def test_llm_unconfigured_without_key():
    provider = LLMProvider(Settings())
    assert not provider.configured
    with pytest.raises(ProviderUnconfigured):
        provider.fetch(GenerationRequest("Dev", prompt="p"))


def test_llm_returns_stripped_text(llm_client):
    llm_client.chat.completions.create.return_value = _completion("  hello \n")
    provider = LLMProvider(Settings(ai_api_key="k", ai_model="test-model"))

    assert provider.fetch(GenerationRequest("Dev", generation="ranking", prompt="rank")) == "hello"
    kwargs = llm_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"] == [{"role": "user", "content": "rank"}]
    assert kwargs["temperature"] == 0.1


def test_llm_connection_error_is_unreachable(llm_client):
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    llm_client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
    with pytest.raises(ProviderUnreachable):
        LLMProvider(Settings(ai_api_key="k")).fetch(GenerationRequest("Dev", prompt="p"))


def test_llm_rejected_key_is_unconfigured(llm_client):
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    response = httpx.Response(401, request=request)
    llm_client.chat.completions.create.side_effect = openai.AuthenticationError(
        "invalid api key", response=response, body=None
    )
    with pytest.raises(ProviderUnconfigured):
        LLMProvider(Settings(ai_api_key="k")).fetch(GenerationRequest("Dev", prompt="p"))


def test_llm_without_choices_is_malformed(llm_client):
    llm_client.chat.completions.create.return_value = SimpleNamespace(choices=[])
    with pytest.raises(ProviderMalformedResponse):
        LLMProvider(Settings(ai_api_key="k")).fetch(GenerationRequest("Dev", prompt="p"))


def test_build_providers_registration_order():
    names = [p.name for p in build_providers(Settings())]
    assert names == ["jsearch", "remotive", "llm", "llm-resume", "youtube", "google-calendar"]
