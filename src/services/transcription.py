"""Caption transcript service using yt-dlp to locate YouTube caption tracks."""

import logging
import re
from typing import Dict, List, Optional

import requests
import yt_dlp

from models.video import FetchResult

logger = logging.getLogger(__name__)

# Configure yt-dlp logging to be silent
logging.getLogger("yt_dlp").setLevel(logging.CRITICAL)

_VIDEO_ID_PATTERN = re.compile(r"[?&]v=([^&]+)")


def extract_video_id(url: str) -> Optional[str]:
    """Pull the ``v`` query parameter out of a watch URL."""
    match = _VIDEO_ID_PATTERN.search(url or "")
    return match.group(1) if match else None


def json3_to_text(payload: Dict) -> str:
    """Flatten a json3 caption document into plain text."""
    pieces = []
    for event in payload.get("events") or []:
        text = "".join(seg.get("utf8", "") for seg in event.get("segs") or [])
        text = text.replace("\n", " ").strip()
        if text:
            pieces.append(text)
    return " ".join(pieces)


def pick_caption_track(info: Dict, languages: List[str]) -> Optional[str]:
    """Return the json3 URL of the best caption track, preferring manual captions.

    Args:
        info: Video information dictionary from yt-dlp
        languages: Preferred language codes in order

    Returns:
        Track URL, or None when the video has no usable captions
    """
    for source in ("subtitles", "automatic_captions"):
        tracks = info.get(source) or {}
        for lang in languages:
            # yt-dlp keys regional variants like "en-US" separately
            keys = [lang] + sorted(k for k in tracks if k.startswith(f"{lang}-"))
            for key in keys:
                for fmt in tracks.get(key) or []:
                    if fmt.get("ext") == "json3" and fmt.get("url"):
                        return fmt["url"]
    return None


class TranscriptService:
    """Best-effort caption retrieval for YouTube videos."""

    def __init__(self, languages: Optional[List[str]] = None, timeout: float = 30.0):
        self.languages = languages or ["en"]
        self.timeout = timeout
        self.ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "socket_timeout": timeout,
        }

    def fetch_transcript(self, video_id: Optional[str]) -> FetchResult[str]:
        """Fetch the caption text for a video.

        Never raises; failures are reported as an absent result.
        """
        if not video_id:
            return FetchResult.absent("no video id")

        try:
            with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
                info = ydl.extract_info(
                    f"https://www.youtube.com/watch?v={video_id}", download=False
                )

            track_url = pick_caption_track(info or {}, self.languages)
            if not track_url:
                logger.debug(f"No captions for video {video_id}")
                return FetchResult.absent("no captions")

            response = requests.get(track_url, timeout=self.timeout)
            response.raise_for_status()
            text = json3_to_text(response.json())

        except Exception as e:
            logger.warning(f"Transcript fetch failed for {video_id}: {e}")
            return FetchResult.absent(str(e))

        if not text:
            return FetchResult.absent("empty transcript")
        return FetchResult.found(text)
