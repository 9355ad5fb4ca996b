"""Tests for duration parsing, scoring and ranking."""

import pytest

from models.video import VideoDetails
from services.ranking import (
    MAX_RESULTS,
    parse_duration,
    rank_videos,
    score_video,
)


def make_video(video_id="abc", **overrides):
    fields = dict(
        title="",
        description="",
        tags=[],
        duration_token="PT30S",
        view_count=0,
        like_count=0,
        comment_count=0,
        thumbnail_url="https://i.ytimg.com/vi/abc/hqdefault.jpg",
    )
    fields.update(overrides)
    return VideoDetails(video_id=video_id, **fields)


@pytest.mark.parametrize("token,expected", [
    ("PT45S", 45),
    ("PT1M", 60),
    ("PT1M5S", 65),
    ("PT0S", 0),
    ("P0D", 0),
    ("PT1H2M3S", 3723),
    ("", 0),
    ("garbage", 0),
])
def test_parse_duration(token, expected):
    assert parse_duration(token) == expected


def test_title_match_scores_like_the_parasailing_example():
    video = make_video(
        title="Parasailing in Goa",
        tags=["beachlife", "watersports", "india"],
        duration_token="PT45S",
        view_count=10000,
        like_count=500,
        comment_count=20,
    )

    candidate = score_video(video, 0, "parasailing in goa")

    # relevance 10, engagement 160, quality 10
    assert candidate.duration_seconds == 45
    assert candidate.score == pytest.approx(55.0)


def test_tag_contained_in_interest_adds_two_points():
    video = make_video(
        title="Parasailing in Goa",
        tags=["goa", "watersports", "beach"],
        duration_token="PT45S",
        view_count=10000,
        like_count=500,
        comment_count=20,
    )

    candidate = score_video(video, 0, "water sports in Goa")

    # only the "goa" tag matches: relevance 2
    assert candidate.score == pytest.approx(0.4 * 2 + 0.3 * 160 + 0.3 * 10)


def test_video_over_a_minute_is_rejected_regardless_of_score():
    video = make_video(
        title="water sports in goa",
        description="water sports in goa",
        tags=["goa", "water", "sports"],
        duration_token="PT1M5S",
        view_count=10 ** 9,
        like_count=10 ** 6,
    )

    assert score_video(video, 0, "water sports in goa") is None
    assert rank_videos([video], "water sports in goa") == []


def test_quality_score_uses_tag_count():
    few_tags = score_video(make_video(tags=["a"]), 0, "zzz")
    many_tags = score_video(make_video(tags=["a", "b", "c"]), 1, "zzz")

    assert few_tags.score == pytest.approx(0.3 * (5 + 2))
    assert many_tags.score == pytest.approx(0.3 * (5 + 5))


def test_relevance_is_case_insensitive():
    video = make_video(title="SNORKELING Trip", description="Best Snorkeling spots")

    candidate = score_video(video, 0, "Snorkeling")

    assert candidate.score == pytest.approx(0.4 * 15 + 0.3 * 7)


def test_location_boost_when_destination_in_text():
    video = make_video(title="Sunset cruise", tags=["Lisbon", "boat", "river"])

    boosted = score_video(video, 0, "boat trips", destination="lisbon")
    plain = score_video(video, 0, "boat trips")
    placeholder = score_video(video, 0, "boat trips", destination="your destination")

    assert boosted.score == pytest.approx(plain.score + 5)
    assert placeholder.score == pytest.approx(plain.score)


def test_scoring_is_deterministic():
    video = make_video(title="Goa beach", view_count=1234, like_count=56, comment_count=7)

    first = score_video(video, 3, "goa")
    second = score_video(video, 3, "goa")

    assert first == second


def test_rank_sorts_descending_and_truncates():
    videos = [make_video(f"v{i}", view_count=i * 1000) for i in range(30)]
    videos.append(make_video("long", duration_token="PT2M", view_count=10 ** 8))

    ranked = rank_videos(videos, "nothing matches")

    assert len(ranked) == MAX_RESULTS
    scores = [c.score for c in ranked]
    assert scores == sorted(scores, reverse=True)
    assert ranked[0].video_id == "v29"
    assert all(c.duration_seconds <= 60 for c in ranked)


def test_sequence_index_is_position_in_combined_list():
    videos = [
        make_video("long", duration_token="PT5M"),
        make_video("short", like_count=10),
    ]

    ranked = rank_videos(videos, "x")

    assert [(c.video_id, c.sequence_index) for c in ranked] == [("short", 1)]
    assert ranked[0].url == "https://www.youtube.com/watch?v=short"


def test_ties_keep_input_order():
    videos = [make_video(f"v{i}") for i in range(5)]

    ranked = rank_videos(videos, "x")

    assert [c.video_id for c in ranked] == ["v0", "v1", "v2", "v3", "v4"]
