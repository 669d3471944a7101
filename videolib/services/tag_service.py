"""
Tag Service

Tag CRUD, the two-level tag hierarchy and usage statistics.
"""
import logging
from typing import Optional, List, Dict, Any

from sqlalchemy import select, delete, func, exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from videolib.exceptions import BadInputError, DuplicateNameError, NotFoundError
from videolib.models import Tag, VideoTag
from videolib.models.tag import DEFAULT_TAG_COLOR, DEFAULT_CATEGORY
from videolib.schemas.tag import TagNode, TagResponse, TagUpdate

logger = logging.getLogger(__name__)


# (name, color, category, level, parent name)
DEFAULT_TAGS = [
    ("KOREA", "#e74c3c", "region", 1, None),
    ("JAPAN", "#f39c12", "region", 1, None),
    ("WESTERN", "#3498db", "region", 1, None),
    ("Genre", "#9b59b6", "meta", 1, None),
    ("Animation", "#1abc9c", "genre", 2, "Genre"),
    ("Comedy", "#f1c40f", "genre", 2, "Genre"),
    ("Drama", "#e67e22", "genre", 2, "Genre"),
    ("Action", "#c0392b", "genre", 2, "Genre"),
    ("Horror", "#2c3e50", "genre", 2, "Genre"),
    ("Romance", "#e84393", "genre", 2, "Genre"),
    ("Thriller", "#7f8c8d", "genre", 2, "Genre"),
    ("SF", "#00cec9", "genre", 2, "Genre"),
]


def tag_to_dict(tag: Tag, video_count: int = 0) -> Dict[str, Any]:
    return {
        "id": tag.id,
        "name": tag.name,
        "color": tag.color,
        "parent_id": tag.parent_id,
        "category": tag.category,
        "level": tag.level,
        "created_at": tag.created_at,
        "video_count": video_count or 0,
    }


class TagService:
    """
    Tag operations.

    Names are unique case-insensitively. Read methods that return dicts
    include the live video_count.
    """

    def __init__(self, db: Session, default_color: str = DEFAULT_TAG_COLOR):
        self.db = db
        self.default_color = default_color

    def _counted(self):
        """SELECT tags with the number of videos carrying each"""
        video_count = func.count(VideoTag.video_id).label("video_count")
        return (
            select(Tag, video_count)
            .outerjoin(VideoTag, VideoTag.tag_id == Tag.id)
            .group_by(Tag.id)
        )

    def _rows_to_dicts(self, rows) -> List[Dict[str, Any]]:
        return [tag_to_dict(tag, count) for tag, count in rows]

    # ----- lookups -----

    def get_tag_by_id(self, tag_id: int) -> Optional[Tag]:
        return self.db.get(Tag, tag_id)

    def get_tag_by_name(self, name: str) -> Optional[Tag]:
        """Case-insensitive lookup by name"""
        return self.db.execute(
            select(Tag).where(func.lower(Tag.name) == name.strip().lower())
        ).scalar_one_or_none()

    def get_tag_with_count(self, tag_id: int) -> Optional[Dict[str, Any]]:
        row = self.db.execute(self._counted().where(Tag.id == tag_id)).first()
        if not row:
            return None
        return tag_to_dict(row[0], row[1])

    def get_all_tags(self) -> List[Dict[str, Any]]:
        """All tags ordered by level, category, name."""
        rows = self.db.execute(
            self._counted().order_by(Tag.level, Tag.category, Tag.name)
        ).all()
        return self._rows_to_dicts(rows)

    def get_tags_by_category(self, category: str) -> List[Dict[str, Any]]:
        rows = self.db.execute(
            self._counted()
            .where(Tag.category == category)
            .order_by(Tag.level, Tag.name)
        ).all()
        return self._rows_to_dicts(rows)

    def get_hierarchical_tags(self) -> Dict[str, Any]:
        """
        Flat tag list plus the tree built from parent_id.

        Tags whose parent is missing become roots. Every tag appears
        exactly once in the tree.
        """
        flat = self.get_all_tags()
        nodes = {item["id"]: TagNode(**item) for item in flat}

        roots: List[TagNode] = []
        for item in flat:
            node = nodes[item["id"]]
            parent = nodes.get(item["parent_id"]) if item["parent_id"] is not None else None
            if parent is None:
                roots.append(node)
            else:
                parent.children.append(node)

        return {
            "tags": [TagResponse(**item) for item in flat],
            "hierarchy": roots,
        }

    def search_tags(self, term: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Tags whose name contains `term` (case-insensitive)"""
        term = (term or "").strip().lower()
        if not term:
            return []
        rows = self.db.execute(
            self._counted()
            .where(func.lower(Tag.name).contains(term, autoescape=True))
            .order_by(Tag.name)
            .limit(limit)
        ).all()
        return self._rows_to_dicts(rows)

    def get_tags_by_video_id(self, video_id: int) -> List[Dict[str, Any]]:
        tags = self.db.execute(
            select(Tag)
            .join(VideoTag, VideoTag.tag_id == Tag.id)
            .where(VideoTag.video_id == video_id)
            .order_by(Tag.name)
        ).scalars().all()
        return [{"id": t.id, "name": t.name, "color": t.color} for t in tags]

    def get_popular_tags(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most-used tags first; unused tags are left out"""
        video_count = func.count(VideoTag.video_id).label("video_count")
        rows = self.db.execute(
            select(Tag, video_count)
            .join(VideoTag, VideoTag.tag_id == Tag.id)
            .group_by(Tag.id)
            .order_by(video_count.desc(), Tag.name)
            .limit(limit)
        ).all()
        return self._rows_to_dicts(rows)

    def get_unused_tags(self) -> List[Dict[str, Any]]:
        tags = self.db.execute(
            select(Tag)
            .where(~exists().where(VideoTag.tag_id == Tag.id))
            .order_by(Tag.name)
        ).scalars().all()
        return [tag_to_dict(t, 0) for t in tags]

    # ----- mutations -----

    def _clean_name(self, name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise BadInputError("Tag name is required")
        return name

    def create_tag(
        self,
        name: str,
        color: Optional[str] = None,
        parent_id: Optional[int] = None,
        category: Optional[str] = None,
        level: Optional[int] = None,
    ) -> Tag:
        """
        Create a tag.

        Raises:
            BadInputError: blank name
            DuplicateNameError: name already used
            NotFoundError: parent_id does not exist
        """
        name = self._clean_name(name)
        if self.get_tag_by_name(name):
            raise DuplicateNameError(name)
        if parent_id is not None and self.get_tag_by_id(parent_id) is None:
            raise NotFoundError("tag", parent_id)

        tag = Tag(
            name=name,
            color=color or self.default_color,
            parent_id=parent_id,
            category=category or DEFAULT_CATEGORY,
            level=level or (2 if parent_id is not None else 1),
        )
        self.db.add(tag)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateNameError(name) from e

        self.db.refresh(tag)
        logger.info(f"Created tag {tag.id}: {tag.name}")
        return tag

    def find_or_create_tag(self, name: str, color: Optional[str] = None) -> Tag:
        """
        Return the tag named `name`, creating it when missing.

        An existing tag keeps its stored color.
        """
        name = self._clean_name(name)
        tag = self.get_tag_by_name(name)
        if tag:
            return tag
        try:
            return self.create_tag(name, color=color)
        except DuplicateNameError:
            # Created concurrently; the row exists now
            return self.get_tag_by_name(name)

    def update_tag(self, tag_id: int, changes: TagUpdate) -> Optional[Tag]:
        """
        Rename, recolor, recategorize or re-parent a tag.

        Returns:
            The updated tag, or None if it does not exist
        """
        tag = self.get_tag_by_id(tag_id)
        if not tag:
            return None

        values = changes.model_dump(exclude_unset=True)

        if "name" in values:
            values["name"] = self._clean_name(values["name"])
            other = self.get_tag_by_name(values["name"])
            if other and other.id != tag.id:
                raise DuplicateNameError(values["name"])

        if "parent_id" in values:
            parent_id = values["parent_id"]
            if parent_id is not None:
                if parent_id == tag.id:
                    raise BadInputError("A tag cannot be its own parent")
                parent = self.get_tag_by_id(parent_id)
                if parent is None:
                    raise NotFoundError("tag", parent_id)
                if self._is_descendant(parent, tag.id):
                    raise BadInputError("Parent tag is a descendant of this tag")
            if values.get("level") is None:
                values["level"] = 2 if parent_id is not None else 1

        for field, value in values.items():
            if field in ("color", "category", "level") and value is None:
                continue
            setattr(tag, field, value)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateNameError(values.get("name", tag.name)) from e

        self.db.refresh(tag)
        return tag

    def _is_descendant(self, tag: Tag, ancestor_id: int) -> bool:
        """True if `ancestor_id` is on the parent chain of `tag`"""
        seen = set()
        current = tag
        while current is not None and current.parent_id is not None:
            if current.parent_id == ancestor_id:
                return True
            if current.parent_id in seen:
                return False
            seen.add(current.parent_id)
            current = self.get_tag_by_id(current.parent_id)
        return False

    def delete_tag(self, tag_id: int) -> bool:
        """
        Delete a tag. Its video links go with it; its children stay and
        lose their parent.
        """
        result = self.db.execute(delete(Tag).where(Tag.id == tag_id))
        self.db.commit()
        if result.rowcount:
            logger.info(f"Deleted tag {tag_id}")
        return result.rowcount > 0

    def cleanup_unused_tags(self) -> int:
        """Delete every tag attached to no video. Returns the count."""
        result = self.db.execute(
            delete(Tag).where(~exists().where(VideoTag.tag_id == Tag.id))
        )
        self.db.commit()
        logger.info(f"Removed {result.rowcount} unused tags")
        return result.rowcount

    def seed_default_tags(self) -> int:
        """Insert the default region/genre tags that are missing."""
        created = 0
        for name, color, category, level, parent_name in DEFAULT_TAGS:
            if self.get_tag_by_name(name):
                continue
            parent = self.get_tag_by_name(parent_name) if parent_name else None
            self.db.add(Tag(
                name=name,
                color=color,
                category=category,
                level=level,
                parent_id=parent.id if parent else None,
            ))
            # flush so later entries can find their parent
            self.db.flush()
            created += 1

        self.db.commit()
        if created:
            logger.info(f"Seeded {created} default tags")
        return created
