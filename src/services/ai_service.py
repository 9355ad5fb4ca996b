"""AI service for search phrase expansion and itinerary writing using Google GenAI."""

import logging
import re
from typing import List, Optional, Sequence

from google.genai import Client
from google.genai import types

from services.ranking import DESTINATION_PLACEHOLDER

logger = logging.getLogger(__name__)

NO_ITINERARY_MESSAGE = "No itinerary generated."
ITINERARY_FAILED_MESSAGE = "Itinerary generation failed."

_LIST_MARKER = re.compile(r"^(?:[-*•]+|\d+[.)])\s*")


def parse_search_phrases(text: str) -> List[str]:
    """Turn a one-phrase-per-line reply into clean search phrases.

    Args:
        text: Raw model reply

    Returns:
        Trimmed phrases without list markers, each at least 3 characters long
    """
    phrases = []
    for line in (text or "").split("\n"):
        phrase = _LIST_MARKER.sub("", line.strip()).strip()
        if len(phrase) > 2:
            phrases.append(phrase)
    return phrases


def response_text(response) -> str:
    """Text of the first part of the first candidate, or '' when missing."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return ""
    return getattr(parts[0], "text", None) or ""


class AIService:
    """Service for Gemini-powered query expansion and itinerary synthesis."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.0-flash-001",
        timeout: float = 30.0,
    ):
        """Initialize Google GenAI client.

        Args:
            api_key: Google GenAI API key
            model_name: Gemini model to use
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model_name = model_name
        self.client = Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

        logger.info(f"Initialized AI service with model: {model_name}")

    def _generate(self, contents, temperature: Optional[float] = None) -> str:
        config = None
        if temperature is not None:
            config = types.GenerateContentConfig(temperature=temperature)
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=config,
        )
        return response_text(response)

    def expand_interest(self, interest: str) -> List[str]:
        """Ask Gemini for short YouTube Shorts search phrases.

        Returns an empty list when the call fails or the reply is empty;
        the caller falls back to a default query.
        """
        if not interest or not interest.strip():
            logger.warning("Empty travel interest provided for query expansion")
            return []

        prompt = (
            f"You're an expert AI travel assistant. Based on the user's travel interest "
            f"\"{interest}\", return exactly 3 clean YouTube Shorts search phrases.\n"
            "Each should be a short keyword phrase (3–7 words), no markdown, no numbering, "
            "no quotes, no explanations. Output only the 3 phrases, one per line."
        )

        try:
            text = self._generate(prompt)
        except Exception as e:
            logger.warning(f"Query expansion failed: {e}")
            return []

        if not text:
            logger.warning("AI response is empty")
            return []

        phrases = parse_search_phrases(text)
        logger.info(f"Expanded '{interest}' into {len(phrases)} phrases: {phrases}")
        return phrases

    def extract_destination(self, interest: str) -> str:
        """Reduce the travel interest to a single place name."""
        prompt = (
            f"From this travel prompt: \"{interest}\", extract the most likely "
            "destination or place name only."
        )

        try:
            text = self._generate(prompt, temperature=0.0)
        except Exception as e:
            logger.warning(f"Destination extraction failed: {e}")
            return DESTINATION_PLACEHOLDER

        destination = text.strip().strip('."\'')
        if not destination:
            return DESTINATION_PLACEHOLDER

        logger.info(f"Extracted destination: {destination}")
        return destination

    def write_itinerary(self, parts: Sequence[types.Part]) -> str:
        """Send the assembled itinerary request and return the markdown reply.

        Never raises: failures come back as a message string.
        """
        contents = [types.Content(role="user", parts=list(parts))]

        try:
            text = self._generate(contents)
        except Exception as e:
            logger.error(f"Gemini itinerary error: {e}")
            return ITINERARY_FAILED_MESSAGE

        if not text:
            logger.warning("Gemini returned an empty itinerary")
            return NO_ITINERARY_MESSAGE
        return text


ITINERARY_INSTRUCTIONS = """You're an AI travel planner. The user wants a detailed 2-day itinerary in {destination}.
Use the following YouTube Shorts (with thumbnails, captions, and metadata) to infer:

- Main activities
- Type of travel (adventure, culture, chill, food, etc.)
- Neighborhoods or regions shown
- Cost estimates
- Suggested groupings by time of day
- Booking recommendations

**Format:**
- Use markdown
- Day 1 / Day 2
- Morning / Afternoon / Evening
- Approximate cost
- Booking suggestions (Airbnb Experiences, Viator, etc.)

Use real content only. Do not hallucinate or guess.

Videos:"""


def format_video_block(position: int, candidate, transcript: Optional[str]) -> str:
    """Text block describing one selected video."""
    tags = ", ".join(candidate.tags) if candidate.tags else "None"
    return (
        f"Video {position} metadata:\n"
        f"- Title: {candidate.title}\n"
        f"- Description: {candidate.description or 'No description'}\n"
        f"- Tags: {tags}\n"
        f"- Transcript: {transcript or 'Transcript not available'}\n"
        f"- Link: {candidate.url}"
    )


def build_itinerary_parts(destination: str, evidence) -> List[types.Part]:
    """Assemble the instruction block followed by one block per video.

    Args:
        destination: Extracted destination name
        evidence: Sequence of (candidate, transcript FetchResult, thumbnail FetchResult)

    Returns:
        Parts for a single multimodal request
    """
    parts = [types.Part.from_text(text=ITINERARY_INSTRUCTIONS.format(destination=destination))]

    for position, (candidate, transcript, thumbnail) in enumerate(evidence, start=1):
        if thumbnail.available:
            parts.append(types.Part.from_bytes(data=thumbnail.value, mime_type="image/jpeg"))
        parts.append(types.Part.from_text(
            text=format_video_block(position, candidate, transcript.value)
        ))

    return parts
