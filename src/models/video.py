"""Video-related data models."""

from dataclasses import dataclass, field
from typing import Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


def _to_int(value) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def _pick_thumbnail(thumbnails: Dict) -> str:
    for size in ("high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


@dataclass
class VideoDetails:
    """Raw metadata for one YouTube video, as returned by videos.list."""

    video_id: str
    title: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    duration_token: str = ""
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    thumbnail_url: str = ""

    @classmethod
    def from_api_item(cls, item: Dict) -> "VideoDetails":
        """Build from a YouTube Data API ``videos`` resource."""
        snippet = item.get("snippet") or {}
        content_details = item.get("contentDetails") or {}
        stats = item.get("statistics") or {}

        return cls(
            video_id=item.get("id") or "",
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            tags=list(snippet.get("tags") or []),
            duration_token=content_details.get("duration") or "",
            view_count=_to_int(stats.get("viewCount")),
            like_count=_to_int(stats.get("likeCount")),
            comment_count=_to_int(stats.get("commentCount")),
            thumbnail_url=_pick_thumbnail(snippet.get("thumbnails") or {}),
        )

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


@dataclass
class Candidate:
    """A short video that passed the duration filter and carries a score."""

    sequence_index: int  # position in the combined details list
    video_id: str
    url: str
    title: str
    description: str
    tags: List[str]
    thumbnail_url: str
    duration_seconds: int
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    score: float = 0.0

    def to_dict(self) -> dict:
        return {
            'id': self.sequence_index,
            'video_id': self.video_id,
            'url': self.url,
            'title': self.title,
            'description': self.description,
            'tags': list(self.tags),
            'thumbnail': self.thumbnail_url,
            'duration_seconds': self.duration_seconds,
            'view_count': self.view_count,
            'like_count': self.like_count,
            'comment_count': self.comment_count,
            'score': self.score,
        }


@dataclass
class FetchResult(Generic[T]):
    """Outcome of a best-effort fetch: either a value or the reason it is absent."""

    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.value is not None

    @classmethod
    def found(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def absent(cls, reason: str) -> "FetchResult[T]":
        return cls(value=None, reason=reason)
