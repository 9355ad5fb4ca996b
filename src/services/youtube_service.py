"""YouTube search service using the YouTube Data API v3."""

import logging
from typing import List, Dict, Optional

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from models.video import VideoDetails
from utils.errors import InputError, NetworkError, ServiceResponseError

logger = logging.getLogger(__name__)

# videos.list accepts at most 50 ids per call
DETAILS_BATCH_SIZE = 50


def extract_video_ids(search_response: Dict) -> List[str]:
    """Return the ids of playable video results in a search.list response.

    Args:
        search_response: Parsed search.list response body

    Returns:
        Video ids in response order
    """
    if not isinstance(search_response, dict):
        raise ServiceResponseError("Search response is not an object")

    video_ids = []
    for item in search_response.get("items") or []:
        item_id = item.get("id") or {}
        if item_id.get("kind") == "youtube#video" and item_id.get("videoId"):
            video_ids.append(item_id["videoId"])
    return video_ids


def chunk_ids(video_ids: List[str], size: int = DETAILS_BATCH_SIZE) -> List[List[str]]:
    """Split ids into batches the details endpoint accepts."""
    return [video_ids[i:i + size] for i in range(0, len(video_ids), size)]


class YouTubeService:
    """Service for searching YouTube and resolving video metadata."""

    def __init__(self, api_key: str, max_results: int = 15, timeout: float = 30.0):
        """Initialize YouTube Data API client.

        Args:
            api_key: YouTube Data API key
            max_results: Results requested per search phrase
            timeout: Socket timeout in seconds for every request
        """
        self.max_results = max_results
        self.timeout = timeout
        self.client = build(
            "youtube", "v3", developerKey=api_key, cache_discovery=False
        )

        logger.info(f"Initialized YouTube service (max {max_results} results per phrase)")

    def _execute(self, request, what: str) -> Dict:
        # httplib2.Http is not thread-safe, give every call its own
        try:
            return request.execute(http=httplib2.Http(timeout=self.timeout))
        except HttpError as e:
            logger.error(f"YouTube {what} failed with status {e.resp.status}: {e}")
            raise ServiceResponseError(f"YouTube {what} failed: {e}") from e
        except (OSError, httplib2.HttpLib2Error) as e:
            logger.error(f"YouTube {what} network error: {e}")
            raise NetworkError(f"Network error: {e}") from e
        except ValueError as e:
            logger.error(f"YouTube {what} returned a malformed body: {e}")
            raise ServiceResponseError(f"Malformed YouTube response: {e}") from e

    def search_videos(self, search_phrase: str) -> List[str]:
        """Search YouTube for videos matching the search phrase.

        Returns:
            Ids of playable video results
        """
        if not search_phrase.strip():
            return []

        logger.info(f"Searching YouTube for: '{search_phrase}'")

        request = self.client.search().list(
            part="snippet",
            type="video",
            maxResults=self.max_results,
            q=search_phrase,
        )
        response = self._execute(request, "search")
        video_ids = extract_video_ids(response)

        logger.debug(f"Found {len(video_ids)} videos for '{search_phrase}'")
        return video_ids

    def get_video_details(self, video_ids: List[str]) -> List[VideoDetails]:
        """Fetch snippet, duration and statistics for up to 50 videos."""
        if not video_ids:
            return []
        if len(video_ids) > DETAILS_BATCH_SIZE:
            raise InputError(f"At most {DETAILS_BATCH_SIZE} ids per details request")

        request = self.client.videos().list(
            part="snippet,contentDetails,statistics",
            id=",".join(video_ids),
            maxResults=DETAILS_BATCH_SIZE,
        )
        response = self._execute(request, "details lookup")
        if not isinstance(response, dict):
            raise ServiceResponseError("Details response is not an object")

        details = []
        for item in response.get("items") or []:
            parsed = self._parse_video_item(item)
            if parsed:
                details.append(parsed)
        return details

    def _parse_video_item(self, item: Dict) -> Optional[VideoDetails]:
        """Parse a videos.list item into a VideoDetails object."""
        if not isinstance(item, dict) or not item.get("id"):
            logger.warning(f"Skipping video item without id: {item!r}")
            return None
        return VideoDetails.from_api_item(item)
