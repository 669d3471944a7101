"""
Tag Service Tests

Tests for tag CRUD, hierarchy and live video counts.
"""
import pytest
from sqlalchemy import select, func

from videolib.exceptions import BadInputError, DuplicateNameError, NotFoundError
from videolib.models import Tag, VideoTag
from videolib.schemas.tag import TagUpdate
from videolib.services.tag_service import DEFAULT_TAGS, TagService
from videolib.services.video_service import VideoService


class TestCreateTag:
    """Tests for TagService.create_tag"""

    def test_defaults(self, db_session):
        tag = TagService(db_session).create_tag("Travel")

        assert tag.color == "#007bff"
        assert tag.category == "custom"
        assert tag.level == 1
        assert tag.parent_id is None

    def test_child_defaults_to_level_two(self, db_session, make_tag):
        parent = make_tag("Genre", category="meta")
        tag = TagService(db_session).create_tag("Noir", parent_id=parent.id, category="genre")

        assert tag.level == 2
        assert tag.parent_id == parent.id

    def test_duplicate_name_case_insensitive(self, db_session, sample_tag):
        with pytest.raises(DuplicateNameError):
            TagService(db_session).create_tag("comedy")

    def test_blank_name(self, db_session):
        with pytest.raises(BadInputError):
            TagService(db_session).create_tag("   ")

    def test_unknown_parent(self, db_session):
        with pytest.raises(NotFoundError):
            TagService(db_session).create_tag("Orphan", parent_id=404)


class TestFindOrCreate:
    """Tests for TagService.find_or_create_tag"""

    def test_creates_missing(self, db_session):
        tag = TagService(db_session).find_or_create_tag("Sunset", "#ff8800")
        assert tag.id is not None
        assert tag.color == "#ff8800"

    def test_finds_existing_case_insensitive(self, db_session, sample_tag):
        tag = TagService(db_session).find_or_create_tag("COMEDY", "#000000")

        assert tag.id == sample_tag.id
        # Stored color is kept
        assert tag.color == "#f1c40f"
        assert db_session.execute(select(func.count(Tag.id))).scalar() == 1


class TestUpdateDeleteTag:
    """Tests for update_tag / delete_tag"""

    def test_update_fields(self, db_session, sample_tag):
        service = TagService(db_session)
        tag = service.update_tag(sample_tag.id, TagUpdate(name="Comedies", color="#111111"))

        assert tag.name == "Comedies"
        assert tag.color == "#111111"
        assert tag.category == "genre"

    def test_update_missing(self, db_session):
        assert TagService(db_session).update_tag(999, TagUpdate(name="x")) is None

    def test_rename_to_existing(self, db_session, sample_tag, make_tag):
        other = make_tag("Drama")
        with pytest.raises(DuplicateNameError):
            TagService(db_session).update_tag(other.id, TagUpdate(name="COMEDY"))

    def test_reparent_sets_level(self, db_session, sample_tag, make_tag):
        parent = make_tag("Genre", category="meta")
        service = TagService(db_session)

        tag = service.update_tag(sample_tag.id, TagUpdate(parent_id=parent.id))
        assert tag.level == 2

        tag = service.update_tag(sample_tag.id, TagUpdate(parent_id=None))
        assert tag.parent_id is None
        assert tag.level == 1

    def test_self_parent_rejected(self, db_session, sample_tag):
        with pytest.raises(BadInputError):
            TagService(db_session).update_tag(sample_tag.id, TagUpdate(parent_id=sample_tag.id))

    def test_two_node_cycle_rejected(self, db_session, make_tag):
        parent = make_tag("Genre", category="meta")
        child = make_tag("Horror", parent_id=parent.id, level=2)

        with pytest.raises(BadInputError):
            TagService(db_session).update_tag(parent.id, TagUpdate(parent_id=child.id))

    def test_longer_cycle_rejected(self, db_session, make_tag):
        a = make_tag("A")
        b = make_tag("B", parent_id=a.id, level=2)
        c = make_tag("C", parent_id=b.id, level=2)
        service = TagService(db_session)

        with pytest.raises(BadInputError):
            service.update_tag(a.id, TagUpdate(parent_id=c.id))

        db_session.refresh(a)
        assert a.parent_id is None
        roots = service.get_hierarchical_tags()["hierarchy"]
        assert [node.name for node in roots] == ["A"]

    def test_delete_removes_links(self, db_session, sample_video, sample_tag, link):
        link(sample_video, sample_tag)

        assert TagService(db_session).delete_tag(sample_tag.id) is True

        assert db_session.execute(select(func.count(VideoTag.id))).scalar() == 0
        assert VideoService(db_session).get_video_by_id(sample_video.id)["tags"] == []

    def test_delete_keeps_children(self, db_session, make_tag):
        parent = make_tag("Genre", category="meta")
        child = make_tag("Horror", parent_id=parent.id, level=2)
        service = TagService(db_session)

        assert service.delete_tag(parent.id) is True

        survivor = service.get_tag_by_id(child.id)
        assert survivor is not None
        assert survivor.parent_id is None

    def test_delete_missing(self, db_session):
        assert TagService(db_session).delete_tag(999) is False


class TestTagListing:
    """Tests for listings and live counts"""

    def test_video_count_tracks_links(self, db_session, make_video, sample_tag):
        first = make_video("First")
        second = make_video("Second")
        videos = VideoService(db_session)
        tags = TagService(db_session)

        def count():
            return next(t for t in tags.get_all_tags() if t["id"] == sample_tag.id)["video_count"]

        assert count() == 0
        videos.add_tag_to_video(first.id, sample_tag.id)
        videos.add_tag_to_video(second.id, sample_tag.id)
        videos.add_tag_to_video(second.id, sample_tag.id)
        assert count() == 2
        videos.remove_tag_from_video(first.id, sample_tag.id)
        assert count() == 1
        videos.delete_video(second.id)
        assert count() == 0

    def test_ordering(self, db_session, make_tag):
        make_tag("Zeta", category="custom", level=1)
        make_tag("Alpha", category="region", level=1)
        make_tag("Beta", category="custom", level=1)
        make_tag("Child", category="custom", level=2)

        names = [t["name"] for t in TagService(db_session).get_all_tags()]
        assert names == ["Beta", "Zeta", "Alpha", "Child"]

    def test_by_category(self, db_session, make_tag):
        make_tag("KOREA", category="region")
        make_tag("Comedy", category="genre", level=2)

        names = [t["name"] for t in TagService(db_session).get_tags_by_category("region")]
        assert names == ["KOREA"]

    def test_hierarchy(self, db_session, make_tag):
        genre = make_tag("Genre", category="meta")
        make_tag("Comedy", category="genre", level=2, parent_id=genre.id)
        make_tag("Drama", category="genre", level=2, parent_id=genre.id)
        make_tag("KOREA", category="region")

        result = TagService(db_session).get_hierarchical_tags()

        assert len(result["tags"]) == 4
        roots = {node.name: node for node in result["hierarchy"]}
        assert set(roots) == {"Genre", "KOREA"}
        assert sorted(c.name for c in roots["Genre"].children) == ["Comedy", "Drama"]
        assert roots["KOREA"].children == []

    def test_search_tags(self, db_session, make_tag):
        make_tag("Comedy")
        make_tag("Romcom")
        make_tag("Drama")

        names = [t["name"] for t in TagService(db_session).search_tags("COM")]
        assert names == ["Comedy", "Romcom"]

    def test_search_escapes_wildcards(self, db_session, make_tag):
        make_tag("100%")
        make_tag("1000")

        names = [t["name"] for t in TagService(db_session).search_tags("0%")]
        assert names == ["100%"]

    def test_tags_by_video(self, db_session, sample_video, sample_tag, link):
        link(sample_video, sample_tag)
        tags = TagService(db_session).get_tags_by_video_id(sample_video.id)
        assert tags == [{"id": sample_tag.id, "name": "Comedy", "color": "#f1c40f"}]

    def test_popular_and_unused(self, db_session, make_video, make_tag, link):
        a, b = make_video("A"), make_video("B")
        popular = make_tag("Popular")
        rare = make_tag("Rare")
        unused = make_tag("Unused")
        link(a, popular)
        link(b, popular)
        link(a, rare)
        service = TagService(db_session)

        assert [t["name"] for t in service.get_popular_tags()] == ["Popular", "Rare"]
        assert [t["name"] for t in service.get_unused_tags()] == ["Unused"]

        assert service.cleanup_unused_tags() == 1
        assert service.get_tag_by_id(unused.id) is None
        assert service.get_tag_by_id(rare.id) is not None


class TestSeedTags:
    """Tests for default tag seeding"""

    def test_seed_is_idempotent(self, db_session):
        service = TagService(db_session)

        assert service.seed_default_tags() == len(DEFAULT_TAGS)
        assert service.seed_default_tags() == 0

    def test_genres_under_genre(self, db_session):
        service = TagService(db_session)
        service.seed_default_tags()

        genre = service.get_tag_by_name("Genre")
        comedy = service.get_tag_by_name("comedy")
        assert comedy.parent_id == genre.id
        assert comedy.level == 2
        assert service.get_tag_by_name("KOREA").category == "region"
