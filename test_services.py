"""Tests for service helpers that need no network access."""

import socket
from types import SimpleNamespace

import httplib2
import pytest
from googleapiclient.errors import HttpError

from models.session import PlannerSession, SessionStatus, SessionStore
from models.video import Candidate, FetchResult, VideoDetails
from services.ai_service import (
    AIService,
    ITINERARY_FAILED_MESSAGE,
    NO_ITINERARY_MESSAGE,
    build_itinerary_parts,
    parse_search_phrases,
    response_text,
)
from services.transcription import extract_video_id, json3_to_text, pick_caption_track
from services.ranking import DESTINATION_PLACEHOLDER
from services.youtube_service import YouTubeService, chunk_ids, extract_video_ids
from utils.config import validate_config
from utils.errors import InputError, NetworkError, ServiceResponseError


def test_parse_search_phrases_cleans_lines():
    text = "- goa parasailing adventure\n\n  * jet ski goa beach  \n1. scuba diving grande island\nok\n"

    assert parse_search_phrases(text) == [
        "goa parasailing adventure",
        "jet ski goa beach",
        "scuba diving grande island",
    ]


def test_parse_search_phrases_empty():
    assert parse_search_phrases("") == []
    assert parse_search_phrases(None) == []


def test_response_text_handles_missing_fields():
    part = SimpleNamespace(text="hello")
    full = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])

    assert response_text(full) == "hello"
    assert response_text(SimpleNamespace(candidates=None)) == ""
    assert response_text(SimpleNamespace(candidates=[SimpleNamespace(content=None)])) == ""


def test_extract_video_ids_keeps_playable_videos():
    response = {
        "items": [
            {"id": {"kind": "youtube#video", "videoId": "a"}},
            {"id": {"kind": "youtube#channel", "channelId": "c"}},
            {"id": {"kind": "youtube#video", "videoId": ""}},
            {"id": {"kind": "youtube#video", "videoId": "b"}},
        ]
    }

    assert extract_video_ids(response) == ["a", "b"]
    assert extract_video_ids({}) == []


def test_extract_video_ids_rejects_malformed_body():
    with pytest.raises(ServiceResponseError):
        extract_video_ids(["not", "a", "dict"])


def test_chunk_ids():
    ids = [str(i) for i in range(101)]

    assert [len(batch) for batch in chunk_ids(ids)] == [50, 50, 1]
    assert chunk_ids([]) == []


def test_video_details_from_api_item_defaults():
    item = {
        "id": "abc",
        "snippet": {
            "title": "Goa sunset",
            "thumbnails": {"medium": {"url": "https://i.ytimg.com/vi/abc/mqdefault.jpg"}},
        },
        "contentDetails": {"duration": "PT20S"},
        "statistics": {"viewCount": "1500", "likeCount": "12"},
    }

    details = VideoDetails.from_api_item(item)

    assert details.description == ""
    assert details.tags == []
    assert details.view_count == 1500
    assert details.like_count == 12
    assert details.comment_count == 0
    assert details.thumbnail_url.endswith("mqdefault.jpg")
    assert details.url == "https://www.youtube.com/watch?v=abc"


def test_extract_video_id():
    assert extract_video_id("https://www.youtube.com/watch?v=abc123") == "abc123"
    assert extract_video_id("https://www.youtube.com/watch?list=x&v=zz&t=3") == "zz"
    assert extract_video_id("https://youtu.be/abc123") is None


def test_json3_to_text():
    payload = {"events": [
        {"segs": [{"utf8": "hello "}, {"utf8": "there"}]},
        {"tStartMs": 10},
        {"segs": [{"utf8": "\n"}]},
        {"segs": [{"utf8": "goa"}]},
    ]}

    assert json3_to_text(payload) == "hello there goa"


def test_pick_caption_track_prefers_manual_subtitles():
    info = {
        "subtitles": {"en-GB": [{"ext": "vtt", "url": "vtt"}, {"ext": "json3", "url": "manual"}]},
        "automatic_captions": {"en": [{"ext": "json3", "url": "auto"}]},
    }

    assert pick_caption_track(info, ["en"]) == "manual"
    assert pick_caption_track({"automatic_captions": info["automatic_captions"]}, ["en"]) == "auto"
    assert pick_caption_track(info, ["fr"]) is None


def test_build_itinerary_parts_inlines_thumbnails():
    candidate = Candidate(
        sequence_index=0, video_id="a", url="https://www.youtube.com/watch?v=a",
        title="Jet ski", description="", tags=[], thumbnail_url="t", duration_seconds=30,
    )

    parts = build_itinerary_parts("Goa", [
        (candidate, FetchResult.absent("none"), FetchResult.found(b"\xff\xd8jpeg")),
    ])

    assert len(parts) == 3
    assert "itinerary in Goa" in parts[0].text
    assert parts[1].inline_data.mime_type == "image/jpeg"
    assert "Description: No description" in parts[2].text
    assert "Tags: None" in parts[2].text
    assert "Transcript: Transcript not available" in parts[2].text


def test_toggle_selection_twice_restores_state():
    candidate = Candidate(
        sequence_index=4, video_id="a", url="u", title="t", description="",
        tags=[], thumbnail_url="", duration_seconds=10,
    )
    session = PlannerSession(session_id="s", candidates=[candidate], selected=set())

    session.toggle_selection(4)
    assert session.selected == {4}
    session.toggle_selection(4)
    assert session.selected == set()

    with pytest.raises(InputError):
        session.toggle_selection(99)


def test_validate_config_reports_missing_keys():
    errors = validate_config({'gemini_api_key': None, 'youtube_api_key': '', 'request_timeout_seconds': 0})

    assert "GEMINI_API_KEY is required" in errors
    assert "YOUTUBE_API_KEY is required" in errors
    assert "REQUEST_TIMEOUT_SECONDS must be positive" in errors


def test_session_store_expires_idle_sessions():
    now = [1000.0]
    store = SessionStore(max_sessions=10, ttl_seconds=60, clock=lambda: now[0])
    idle = store.create()
    busy = store.create()
    busy.update_status(SessionStatus.SEARCHING)

    now[0] += 30
    assert store.get(idle.session_id) is idle

    now[0] += 61
    fresh = store.create()

    assert store.get(idle.session_id) is None
    assert store.get(busy.session_id) is busy
    assert fresh.session_id in store
    assert len(store) == 2


def stub_ai_service(generate_content):
    service = AIService("test_key")
    service.client = SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))
    return service


def _raise_connection_error(**kwargs):
    raise ConnectionError("connection reset by peer")


def _empty_response(**kwargs):
    return SimpleNamespace(candidates=[])


def test_ai_service_failures_are_soft():
    service = stub_ai_service(_raise_connection_error)

    assert service.expand_interest("water sports in goa") == []
    assert service.extract_destination("water sports in goa") == DESTINATION_PLACEHOLDER
    assert service.write_itinerary([]) == ITINERARY_FAILED_MESSAGE


def test_ai_service_empty_replies():
    service = stub_ai_service(_empty_response)

    assert service.expand_interest("water sports in goa") == []
    assert service.extract_destination("water sports in goa") == DESTINATION_PLACEHOLDER
    assert service.write_itinerary([]) == NO_ITINERARY_MESSAGE


def test_ai_service_returns_reply_text():
    reply = SimpleNamespace(candidates=[SimpleNamespace(
        content=SimpleNamespace(parts=[SimpleNamespace(text=" Goa.\n")])
    )])
    service = stub_ai_service(lambda **kwargs: reply)

    assert service.extract_destination("water sports in goa") == "Goa"
    assert service.write_itinerary([]) == " Goa.\n"


class FailingRequest:
    def __init__(self, error):
        self.error = error

    def execute(self, http=None):
        raise self.error


def stub_youtube_service(error):
    service = YouTubeService("test_key")
    request = FailingRequest(error)
    endpoint = SimpleNamespace(list=lambda **kwargs: request)
    service.client = SimpleNamespace(search=lambda: endpoint, videos=lambda: endpoint)
    return service


@pytest.mark.parametrize("error,expected", [
    (HttpError(httplib2.Response({"status": 403}), b"quotaExceeded"), ServiceResponseError),
    (socket.timeout("timed out"), NetworkError),
    (httplib2.ServerNotFoundError("no such host"), NetworkError),
    (ValueError("Expecting value"), ServiceResponseError),
])
def test_youtube_errors_are_converted(error, expected):
    service = stub_youtube_service(error)

    with pytest.raises(expected):
        service.search_videos("goa beach")
    with pytest.raises(expected):
        service.get_video_details(["a"])


def test_youtube_details_reject_oversized_batches():
    service = YouTubeService("test_key")

    with pytest.raises(InputError):
        service.get_video_details([str(i) for i in range(51)])
