"""Thumbnail download service."""

import logging

import requests

from models.video import FetchResult

logger = logging.getLogger(__name__)


class ThumbnailService:
    """Downloads video thumbnails so they can be inlined into a Gemini request."""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def fetch_thumbnail(self, url: str) -> FetchResult[bytes]:
        """Download a thumbnail image. Never raises."""
        if not url:
            return FetchResult.absent("no thumbnail url")

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch thumbnail {url}: {e}")
            return FetchResult.absent(str(e))

        if not response.content:
            return FetchResult.absent("empty image")
        return FetchResult.found(response.content)
