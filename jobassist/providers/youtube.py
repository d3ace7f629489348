"""YouTube Data API v3 video search."""
from __future__ import annotations

from jobassist.errors import ProviderMalformedResponse
from jobassist.log import get_logger
from jobassist.models import ProviderKind, Query, ResultItem
from jobassist.providers.base import Provider, http_json

log = get_logger(__name__)

API_URL = "https://www.googleapis.com/youtube/v3/search"


class YouTubeSource(Provider):
    name = "youtube"
    kind = ProviderKind.VIDEO_SEARCH

    @property
    def configured(self) -> bool:
        return bool(self.settings.youtube_api_key)

    def fetch(self, request: Query) -> list[ResultItem]:
        data = http_json(
            self.name,
            "GET",
            API_URL,
            params={
                "part": "snippet",
                "q": request.keywords,
                "type": "video",
                "maxResults": request.results_per_page,
                "order": "relevance",
                "videoDuration": "medium",
                "key": self.settings.youtube_api_key,
            },
            timeout=self.settings.http_timeout,
        )
        hits = data.get("items") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            raise ProviderMalformedResponse("missing 'items' list", self.name)

        videos: list[ResultItem] = []
        for hit in hits:
            ident = hit.get("id") if isinstance(hit, dict) else None
            video_id = ident.get("videoId") if isinstance(ident, dict) else None
            if not video_id:
                continue
            snippet = hit.get("snippet") or {}
            thumbs = snippet.get("thumbnails") or {}
            thumb = (thumbs.get("high") or thumbs.get("medium") or thumbs.get("default") or {}).get("url", "")
            videos.append(
                ResultItem(
                    id=f"youtube:{video_id}",
                    title=snippet.get("title", ""),
                    company=snippet.get("channelTitle", ""),
                    description=snippet.get("description", ""),
                    url=f"https://www.youtube.com/watch?v={video_id}",
                    posted_at=snippet.get("publishedAt"),
                    source="youtube",
                    raw={"thumbnail": thumb, "query": request.keywords},
                )
            )
        log.debug("YouTube q=%r returned %d videos", request.keywords, len(videos))
        return videos
