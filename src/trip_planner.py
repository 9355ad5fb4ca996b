"""Main tripreel class for orchestrating search, ranking and itinerary writing."""

import asyncio
import logging
import time
from typing import List, Dict, Optional

from models.session import PlannerSession, SessionStatus
from models.video import Candidate, FetchResult, VideoDetails
from utils.config import load_config, validate_config
from utils.errors import InputError
from services.ai_service import AIService, build_itinerary_parts
from services.youtube_service import YouTubeService, chunk_ids
from services.ranking import rank_videos, DESTINATION_PLACEHOLDER
from services.thumbnail_service import ThumbnailService
from services.transcription import TranscriptService, extract_video_id

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Something went wrong. Please check API keys or quota."
GENERATE_FAILED_MESSAGE = "Failed to generate itinerary."


class TripPlanner:
    """Central orchestrator for tripreel."""

    def __init__(
        self,
        config: Optional[Dict] = None,
        youtube_service: Optional[YouTubeService] = None,
        ai_service: Optional[AIService] = None,
        transcript_service: Optional[TranscriptService] = None,
        thumbnail_service: Optional[ThumbnailService] = None,
    ):
        """Initialize the planner with configuration.

        Services are built from the configuration unless passed in.
        """
        self.config = config or load_config()

        config_errors = validate_config(self.config)
        if config_errors:
            error_msg = "Configuration errors: " + "; ".join(config_errors)
            logger.error(error_msg)
            raise ValueError(error_msg)

        timeout = self.config.get("request_timeout_seconds", 30.0)

        self.youtube_service = youtube_service or YouTubeService(
            self.config["youtube_api_key"],
            max_results=self.config.get("max_results_per_phrase", 15),
            timeout=timeout,
        )
        self.ai_service = ai_service or AIService(
            self.config["gemini_api_key"],
            self.config.get("gemini_model", "gemini-2.0-flash-001"),
            timeout=timeout,
        )
        self.transcript_service = transcript_service or TranscriptService(
            self.config.get("caption_languages") or ["en"], timeout=timeout
        )
        self.thumbnail_service = thumbnail_service or ThumbnailService(timeout=timeout)

        self.fallback_query = self.config.get("fallback_query", "Goa travel")
        self.use_location_boost = self.config.get("location_boost", True)

        logger.info("tripreel planner initialized successfully")

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    # Session flows

    async def handle_search(self, session: PlannerSession, prompt: str) -> PlannerSession:
        """Run a full search for the session, replacing any previous results."""
        if session.loading:
            logger.info(f"Session {session.session_id} is busy, ignoring search")
            return session
        if not prompt or not prompt.strip():
            raise InputError("A travel interest is required")

        session.reset_for_search(prompt)
        session.update_status(SessionStatus.SEARCHING)

        try:
            candidates, destination = await self.search(prompt)
            session.candidates = candidates
            session.destination = destination
            session.update_status(SessionStatus.READY)
        except Exception as e:
            logger.error(f"Search failed for '{prompt}': {e}")
            session.candidates = []
            session.update_status(SessionStatus.FAILED, SEARCH_FAILED_MESSAGE)

        return session

    async def handle_generate(self, session: PlannerSession) -> PlannerSession:
        """Write an itinerary from the session's selected videos."""
        selected = session.selected_candidates()
        if not selected or session.loading:
            return session

        session.itinerary = ""
        session.error = None
        session.update_status(SessionStatus.GENERATING)

        try:
            session.itinerary = await self.generate_itinerary(session.prompt, selected)
            session.update_status(SessionStatus.READY)
        except Exception as e:
            logger.error(f"Itinerary flow failed: {e}")
            session.update_status(SessionStatus.FAILED, GENERATE_FAILED_MESSAGE)

        return session

    # Pipeline

    async def search(self, interest: str):
        """Expand, collect and rank videos for a travel interest.

        Returns:
            Tuple of (ranked candidates, destination or None)
        """
        start_time = time.time()

        if self.use_location_boost:
            phrases, destination = await asyncio.gather(
                self._run(self.ai_service.expand_interest, interest),
                self._run(self.ai_service.extract_destination, interest),
            )
        else:
            phrases = await self._run(self.ai_service.expand_interest, interest)
            destination = None

        details = await self.collect_video_details(phrases)
        candidates = rank_videos(details, interest, destination)

        logger.info(
            f"Ranked {len(candidates)} of {len(details)} videos for '{interest}' "
            f"in {time.time() - start_time:.1f}s"
        )
        return candidates, destination

    async def collect_video_details(self, phrases: List[str]) -> List[VideoDetails]:
        """Search every phrase, deduplicate the ids and resolve their metadata."""
        results = await asyncio.gather(
            *(self._run(self.youtube_service.search_videos, phrase) for phrase in phrases)
        )

        all_video_ids = [video_id for ids in results for video_id in ids]
        unique_ids = list(dict.fromkeys(all_video_ids))

        if not unique_ids:
            logger.info(f"No videos found, falling back to '{self.fallback_query}'")
            fallback_ids = await self._run(self.youtube_service.search_videos, self.fallback_query)
            unique_ids = list(dict.fromkeys(fallback_ids))

        batches = chunk_ids(unique_ids)
        detail_batches = await asyncio.gather(
            *(self._run(self.youtube_service.get_video_details, batch) for batch in batches)
        )

        details = [item for batch in detail_batches for item in batch]
        logger.info(f"Resolved {len(details)} videos from {len(unique_ids)} unique ids")
        return details

    async def generate_itinerary(self, interest: str, videos: List[Candidate]) -> str:
        """Write a markdown itinerary from the selected videos."""
        if not videos:
            return ""

        destination = await self._run(self.ai_service.extract_destination, interest)
        destination = destination or DESTINATION_PLACEHOLDER

        evidence = await asyncio.gather(*(self._gather_evidence(video) for video in videos))
        available = sum(1 for _, transcript, _ in evidence if transcript.available)
        logger.info(f"Writing itinerary for {destination} from {len(videos)} videos ({available} with captions)")

        parts = build_itinerary_parts(destination, evidence)
        return await self._run(self.ai_service.write_itinerary, parts)

    async def _gather_evidence(self, video: Candidate):
        if self.config.get("include_transcripts", True):
            video_id = extract_video_id(video.url)
            transcript_task = self._run(self.transcript_service.fetch_transcript, video_id)
        else:
            transcript_task = _absent("transcripts disabled")

        if self.config.get("include_thumbnails", True):
            thumbnail_task = self._run(self.thumbnail_service.fetch_thumbnail, video.thumbnail_url)
        else:
            thumbnail_task = _absent("thumbnails disabled")

        transcript, thumbnail = await asyncio.gather(transcript_task, thumbnail_task)
        return video, transcript, thumbnail


async def _absent(reason: str) -> FetchResult:
    return FetchResult.absent(reason)
