"""Heuristic scoring and ranking of short travel videos."""

import logging
import re
from typing import Iterable, List, Optional

from models.video import Candidate, VideoDetails

logger = logging.getLogger(__name__)

MAX_DURATION_SECONDS = 60
MAX_RESULTS = 20
LOCATION_BOOST = 5.0
DESTINATION_PLACEHOLDER = "your destination"

_DURATION_PATTERN = re.compile(
    r"P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?"
)


def parse_duration(token: str) -> int:
    """Parse an ISO-8601 duration such as ``PT1M5S`` into seconds.

    Missing components count as zero, so an unparseable token yields 0.
    """
    match = _DURATION_PATTERN.search(token or "")
    if not match:
        return 0
    days, hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return ((days * 24 + hours) * 60 + minutes) * 60 + seconds


def engagement_score(view_count: int, like_count: int, comment_count: int) -> float:
    return 0.4 * (view_count / 1000) + 0.3 * like_count + 0.3 * comment_count


def relevance_score(title: str, description: str, tags: List[str], interest: str) -> float:
    lower_interest = interest.lower()
    score = 0.0
    if lower_interest in title.lower():
        score += 10
    if lower_interest in description.lower():
        score += 5
    score += 2 * sum(1 for tag in tags if tag.lower() in lower_interest)
    return score


def quality_score(total_seconds: int, tags: List[str]) -> float:
    score = 5.0 if total_seconds <= MAX_DURATION_SECONDS else 0.0
    score += 5.0 if len(tags) >= 3 else 2.0
    return score


def location_boost(details: VideoDetails, destination: Optional[str]) -> float:
    """Return the boost when the destination appears in the video's text."""
    if not destination:
        return 0.0
    place = destination.strip().lower()
    if not place or place == DESTINATION_PLACEHOLDER:
        return 0.0
    haystack = " ".join([details.title, details.description, *details.tags]).lower()
    return LOCATION_BOOST if place in haystack else 0.0


def score_video(
    details: VideoDetails,
    sequence_index: int,
    interest: str,
    destination: Optional[str] = None,
) -> Optional[Candidate]:
    """Score one video, or return None when it is longer than a minute."""
    total_seconds = parse_duration(details.duration_token)
    if total_seconds > MAX_DURATION_SECONDS:
        return None

    final_score = (
        0.4 * relevance_score(details.title, details.description, details.tags, interest)
        + 0.3 * engagement_score(details.view_count, details.like_count, details.comment_count)
        + 0.3 * quality_score(total_seconds, details.tags)
        + location_boost(details, destination)
    )

    return Candidate(
        sequence_index=sequence_index,
        video_id=details.video_id,
        url=details.url,
        title=details.title,
        description=details.description,
        tags=list(details.tags),
        thumbnail_url=details.thumbnail_url,
        duration_seconds=total_seconds,
        view_count=details.view_count,
        like_count=details.like_count,
        comment_count=details.comment_count,
        score=final_score,
    )


def rank_videos(
    videos: Iterable[VideoDetails],
    interest: str,
    destination: Optional[str] = None,
    limit: int = MAX_RESULTS,
) -> List[Candidate]:
    """Score, filter and sort videos, keeping the best ``limit`` of them."""
    candidates = []
    rejected = 0
    for index, details in enumerate(videos):
        candidate = score_video(details, index, interest, destination)
        if candidate is None:
            rejected += 1
            continue
        candidates.append(candidate)

    if rejected:
        logger.info(f"Filtered out {rejected} videos longer than {MAX_DURATION_SECONDS}s")

    # sort() is stable, ties keep their input order
    candidates.sort(key=lambda c: c.score, reverse=True)
    return candidates[:limit]
