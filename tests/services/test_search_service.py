"""
Search Service Tests

Tests for ranked title search, autocomplete, tag intersection and the
composite filter.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from videolib.schemas.common import DateFilterPreset, ResolutionClass, SortField, SortOrder
from videolib.schemas.video import VideoFilter
from videolib.services.search_service import SearchService, date_bounds, normalize_tag_names
from videolib.services.resolution import resolution_class

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class TestTitleSearch:
    """Tests for SearchService.search_by_title"""

    def test_ranking_tiers(self, db_session, make_video):
        """Exact, then prefix, then word start, then substring."""
        make_video("Dematrix", filename="a.mp4")
        make_video("The Matrix Reloaded", filename="b.mp4")
        make_video("Matrix Revolutions", filename="c.mp4")
        make_video("Matrix", filename="d.mp4")

        titles = [v["title"] for v in SearchService(db_session).search_by_title("matrix")]

        assert titles == ["Matrix", "Matrix Revolutions", "The Matrix Reloaded", "Dematrix"]

    def test_newest_first_within_tier(self, db_session, make_video):
        make_video("Matrix One", created_at=NOW - timedelta(days=2))
        make_video("Matrix Two", created_at=NOW - timedelta(days=1))

        titles = [v["title"] for v in SearchService(db_session).search_by_title("matrix")]
        assert titles == ["Matrix Two", "Matrix One"]

    def test_matches_filename(self, db_session, make_video):
        make_video("Untitled", filename="beach_trip.mp4")

        results = SearchService(db_session).search_by_title("BEACH")
        assert [v["filename"] for v in results] == ["beach_trip.mp4"]

    def test_blank_query(self, db_session, sample_video):
        assert SearchService(db_session).search_by_title("   ") == []

    def test_wildcards_are_literal(self, db_session, make_video):
        make_video("100% Real")
        make_video("1000 Ways")

        titles = [v["title"] for v in SearchService(db_session).search_by_title("0%")]
        assert titles == ["100% Real"]


class TestAutocomplete:
    """Tests for SearchService.get_autocomplete_suggestions"""

    def test_short_query(self, db_session, make_video):
        make_video("Matrix")
        assert SearchService(db_session).get_autocomplete_suggestions("m") == []

    def test_distinct_ranked_titles(self, db_session, make_video):
        make_video("The Matrix", filename="a.mp4")
        make_video("Matrix", filename="b.mp4")
        make_video("Matrix", filename="c.mp4")
        make_video("Unrelated", filename="d.mp4")

        suggestions = SearchService(db_session).get_autocomplete_suggestions("mat")
        assert suggestions == ["Matrix", "The Matrix"]

    def test_limit(self, db_session, make_video):
        for i in range(5):
            make_video(f"Clip {i}")

        assert len(SearchService(db_session).get_autocomplete_suggestions("clip", limit=3)) == 3


class TestTagSearch:
    """Tests for single and multi tag search"""

    @pytest.fixture
    def tagged(self, make_video, make_tag, link):
        a = make_video("A", created_at=NOW - timedelta(days=3))
        b = make_video("B", created_at=NOW - timedelta(days=2))
        c = make_video("C", created_at=NOW - timedelta(days=1))
        comedy = make_tag("Comedy")
        korea = make_tag("KOREA")
        link(a, comedy)
        link(b, comedy)
        link(b, korea)
        link(c, korea)
        return a, b, c

    def test_single_tag(self, db_session, tagged):
        titles = [v["title"] for v in SearchService(db_session).search_by_tag("comedy")]
        assert titles == ["B", "A"]

    def test_all_tags_required(self, db_session, tagged):
        results = SearchService(db_session).search_by_tags(["Comedy", "korea"])
        assert [v["title"] for v in results] == ["B"]

    def test_duplicate_names_ignored(self, db_session, tagged):
        results = SearchService(db_session).search_by_tags(["Comedy", "COMEDY "])
        assert [v["title"] for v in results] == ["B", "A"]

    def test_unknown_tag(self, db_session, tagged):
        assert SearchService(db_session).search_by_tags(["Comedy", "Nope"]) == []

    def test_empty_tag_set(self, db_session, tagged):
        assert SearchService(db_session).search_by_tags([]) == []
        assert SearchService(db_session).search_by_tags(["  "]) == []

    def test_normalize(self):
        assert normalize_tag_names([" Comedy", "comedy", "", "KOREA"]) == ["comedy", "korea"]


class TestResolutionClass:
    """Bucket boundaries are inclusive upper bounds"""

    @pytest.mark.parametrize("height,expected", [
        (None, ResolutionClass.SD),
        (480, ResolutionClass.SD),
        (481, ResolutionClass.HD),
        (720, ResolutionClass.HD),
        (721, ResolutionClass.FULLHD),
        (1080, ResolutionClass.FULLHD),
        (1081, ResolutionClass.QHD),
        (1440, ResolutionClass.QHD),
        (2160, ResolutionClass.UHD),
        (2161, ResolutionClass.OTHER),
    ])
    def test_boundaries(self, height, expected):
        assert resolution_class(height) == expected

    def test_sql_matches_python(self, db_session, make_video):
        for height in (480, 720, 721, 1080, 1440, 2160, 4320):
            make_video(f"H{height}", height=height)

        result = SearchService(db_session).filter_videos(
            VideoFilter(resolutions=[ResolutionClass.FULLHD, ResolutionClass.OTHER])
        )
        assert sorted(v["height"] for v in result["items"]) == [721, 1080, 4320]


class TestFilterVideos:
    """Tests for SearchService.filter_videos"""

    def test_no_predicates_returns_all(self, db_session, make_video):
        make_video("One")
        make_video("Two")

        result = SearchService(db_session).filter_videos(VideoFilter())
        assert result["total"] == 2
        assert result["total_pages"] == 1

    def test_empty_result(self, db_session):
        result = SearchService(db_session).filter_videos(VideoFilter())
        assert result["items"] == []
        assert result["total"] == 0
        assert result["total_pages"] == 1

    def test_duration_range_inclusive(self, db_session, make_video):
        for seconds in (30, 60, 90, 120):
            make_video(f"D{seconds}", duration=seconds)

        result = SearchService(db_session).filter_videos(
            VideoFilter(duration_min=60, duration_max=90, sort_by=SortField.DURATION, order=SortOrder.ASC)
        )
        assert [v["duration"] for v in result["items"]] == [60, 90]

    def test_combined_predicates(self, db_session, make_video, make_tag, link):
        comedy = make_tag("Comedy")
        short_hd = make_video("Short HD", height=720, duration=40)
        long_hd = make_video("Long HD", height=720, duration=400)
        short_4k = make_video("Short 4K", height=2160, duration=40)
        for video in (short_hd, long_hd, short_4k):
            link(video, comedy)

        result = SearchService(db_session).filter_videos(VideoFilter(
            tags=["comedy"],
            resolutions=[ResolutionClass.HD],
            duration_max=60,
        ))
        assert [v["title"] for v in result["items"]] == ["Short HD"]

    def test_pagination(self, db_session, make_video):
        for i in range(5):
            make_video(f"Video {i}", created_at=NOW - timedelta(hours=i))

        service = SearchService(db_session)
        first = service.filter_videos(VideoFilter(limit=2, page=1))
        last = service.filter_videos(VideoFilter(limit=2, page=3))

        assert first["total"] == 5
        assert first["total_pages"] == 3
        assert [v["title"] for v in first["items"]] == ["Video 0", "Video 1"]
        assert [v["title"] for v in last["items"]] == ["Video 4"]

    def test_sort_by_title_asc(self, db_session, make_video):
        make_video("Bravo")
        make_video("Alpha")
        make_video("Charlie")

        result = SearchService(db_session).filter_videos(
            VideoFilter(sort_by=SortField.TITLE, order=SortOrder.ASC)
        )
        assert [v["title"] for v in result["items"]] == ["Alpha", "Bravo", "Charlie"]

    def test_date_preset(self, db_session, make_video):
        make_video("Recent", created_at=NOW - timedelta(days=2))
        make_video("Old", created_at=NOW - timedelta(days=40))

        service = SearchService(db_session)
        week = service.filter_videos(VideoFilter(date_filter=DateFilterPreset.WEEK), now=NOW)
        year = service.filter_videos(VideoFilter(date_filter=DateFilterPreset.YEAR), now=NOW)

        assert [v["title"] for v in week["items"]] == ["Recent"]
        assert year["total"] == 2

    def test_custom_dates_cover_whole_days(self, db_session, make_video):
        make_video("Morning", created_at=datetime(2024, 6, 10, 0, 30, tzinfo=timezone.utc))
        make_video("Night", created_at=datetime(2024, 6, 12, 23, 59, tzinfo=timezone.utc))
        make_video("Later", created_at=datetime(2024, 6, 13, 0, 1, tzinfo=timezone.utc))

        result = SearchService(db_session).filter_videos(VideoFilter(
            date_filter=DateFilterPreset.CUSTOM,
            date_from=date(2024, 6, 10),
            date_to=date(2024, 6, 12),
        ))
        assert sorted(v["title"] for v in result["items"]) == ["Morning", "Night"]

    def test_invalid_ranges_rejected(self):
        with pytest.raises(ValueError):
            VideoFilter(duration_min=100, duration_max=10)
        with pytest.raises(ValueError):
            VideoFilter(date_from=date(2024, 2, 1), date_to=date(2024, 1, 1))


class TestDateBounds:
    """Tests for date_bounds"""

    def test_today_starts_at_midnight(self):
        start, end = date_bounds(DateFilterPreset.TODAY, now=NOW)
        assert start == datetime(2024, 6, 15, tzinfo=timezone.utc)
        assert end is None

    def test_month_is_rolling(self):
        start, end = date_bounds(DateFilterPreset.MONTH, now=NOW)
        assert start == NOW - timedelta(days=30)
        assert end is None

    def test_custom_end_is_exclusive_next_day(self):
        start, end = date_bounds(None, date(2024, 1, 1), date(2024, 1, 31))
        assert start == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_nothing_set(self):
        assert date_bounds(None) == (None, None)
