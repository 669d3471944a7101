"""
Search Service

Ranked title search, autocomplete, tag intersection and the composite
video filter.
"""
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional, List, Dict, Any, Tuple

from sqlalchemy import String, select, func, or_, and_, case, distinct
from sqlalchemy.orm import Session

from videolib.models import Video, Tag, VideoTag
from videolib.schemas.common import DateFilterPreset, SortField, SortOrder
from videolib.schemas.video import VideoFilter
from videolib.services.resolution import resolution_class_expr
from videolib.services.video_service import video_query, video_to_dict

logger = logging.getLogger(__name__)

MIN_AUTOCOMPLETE_LENGTH = 2

# Rank tiers, lower is better
TIER_EXACT = 1
TIER_PREFIX = 2
TIER_WORD_START = 3
TIER_SUBSTRING = 4

SORT_COLUMNS = {
    SortField.CREATED_AT: Video.created_at,
    SortField.TITLE: Video.title,
    SortField.DURATION: Video.duration,
    SortField.FILE_SIZE: Video.file_size,
    SortField.HEIGHT: Video.height,
}

PRESET_WINDOWS = {
    DateFilterPreset.WEEK: timedelta(days=7),
    DateFilterPreset.MONTH: timedelta(days=30),
    DateFilterPreset.YEAR: timedelta(days=365),
}


def _lowered(column):
    return func.lower(func.coalesce(column, ""), type_=String)


def normalize_tag_names(names: List[str]) -> List[str]:
    """Lower-cased, stripped, de-duplicated names in input order"""
    cleaned = [n.strip().lower() for n in names if n and n.strip()]
    return list(dict.fromkeys(cleaned))


def date_bounds(
    preset: Optional[DateFilterPreset],
    date_from=None,
    date_to=None,
    now: Optional[datetime] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    created_at window as (start inclusive, end exclusive), UTC.

    Presets are rolling windows ending now; "today" starts at UTC
    midnight. Explicit dates cover whole days.
    """
    now = now or datetime.now(timezone.utc)

    if preset == DateFilterPreset.TODAY:
        return datetime.combine(now.date(), time.min, tzinfo=timezone.utc), None
    if preset in PRESET_WINDOWS:
        return now - PRESET_WINDOWS[preset], None

    start = end = None
    if date_from:
        start = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    if date_to:
        end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


class SearchService:
    """
    Read-only retrieval over the catalog.

    Title matching is case-insensitive. LIKE wildcards in user input are
    escaped.
    """

    def __init__(self, db: Session):
        self.db = db

    # ----- title search -----

    def _title_match(self, term: str):
        title = _lowered(Video.title)
        filename = _lowered(Video.filename)
        return or_(
            title.contains(term, autoescape=True),
            filename.contains(term, autoescape=True),
        )

    def _title_rank(self, term: str):
        title = _lowered(Video.title)
        filename = _lowered(Video.filename)
        word_start = " " + term
        return case(
            (or_(title == term, filename == term), TIER_EXACT),
            (
                or_(
                    title.startswith(term, autoescape=True),
                    filename.startswith(term, autoescape=True),
                ),
                TIER_PREFIX,
            ),
            (
                or_(
                    title.contains(word_start, autoescape=True),
                    filename.contains(word_start, autoescape=True),
                ),
                TIER_WORD_START,
            ),
            else_=TIER_SUBSTRING,
        )

    def search_by_title(self, query: str) -> List[Dict[str, Any]]:
        """
        Videos whose title or filename contains `query`, best match first.

        Tiers: exact, prefix, word-start, substring. Within a tier the
        newest video comes first.
        """
        term = (query or "").strip().lower()
        if not term:
            return []

        rank = self._title_rank(term)
        videos = self.db.execute(
            video_query()
            .where(self._title_match(term))
            .order_by(rank, Video.created_at.desc(), Video.id.desc())
        ).scalars().all()

        logger.debug(f"Title search '{query}': {len(videos)} results")
        return [video_to_dict(v) for v in videos]

    def get_autocomplete_suggestions(self, query: str, limit: int = 10) -> List[str]:
        """Distinct matching titles, best tier first"""
        term = (query or "").strip().lower()
        if len(term) < MIN_AUTOCOMPLETE_LENGTH:
            return []

        best_rank = func.min(self._title_rank(term)).label("best_rank")
        rows = self.db.execute(
            select(Video.title, best_rank)
            .where(Video.title.is_not(None))
            .where(self._title_match(term))
            .group_by(Video.title)
            .order_by(best_rank, Video.title)
            .limit(limit)
        ).all()
        return [row.title for row in rows]

    # ----- tag search -----

    def _tagged_with_all(self, names: List[str]):
        """Subquery of video IDs carrying every tag in `names` (normalized)"""
        lowered_name = func.lower(Tag.name)
        return (
            select(VideoTag.video_id)
            .join(Tag, Tag.id == VideoTag.tag_id)
            .where(lowered_name.in_(names))
            .group_by(VideoTag.video_id)
            .having(func.count(distinct(lowered_name)) == len(names))
        )

    def search_by_tag(self, name: str) -> List[Dict[str, Any]]:
        return self.search_by_tags([name])

    def search_by_tags(self, names: List[str]) -> List[Dict[str, Any]]:
        """
        Videos carrying all of `names`, newest first.

        An empty tag list matches nothing.
        """
        names = normalize_tag_names(names or [])
        if not names:
            return []

        videos = self.db.execute(
            video_query()
            .where(Video.id.in_(self._tagged_with_all(names)))
            .order_by(Video.created_at.desc(), Video.id.desc())
        ).scalars().all()
        return [video_to_dict(v) for v in videos]

    # ----- composite filter -----

    def filter_videos(self, filters: VideoFilter, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Paginated videos matching every active predicate.

        Returns:
            Dictionary with items, total, page, limit, total_pages
        """
        conditions = []

        names = normalize_tag_names(filters.tags)
        if names:
            conditions.append(Video.id.in_(self._tagged_with_all(names)))

        if filters.resolutions:
            labels = [r.value for r in filters.resolutions]
            conditions.append(resolution_class_expr(Video.height).in_(labels))

        if filters.duration_min is not None:
            conditions.append(Video.duration >= filters.duration_min)
        if filters.duration_max is not None:
            conditions.append(Video.duration <= filters.duration_max)

        start, end = date_bounds(filters.date_filter, filters.date_from, filters.date_to, now=now)
        if start is not None:
            conditions.append(Video.created_at >= start)
        if end is not None:
            conditions.append(Video.created_at < end)

        query = video_query()
        id_query = select(Video.id)
        if conditions:
            query = query.where(and_(*conditions))
            id_query = id_query.where(and_(*conditions))

        count_query = select(func.count()).select_from(id_query.subquery())
        total = self.db.execute(count_query).scalar() or 0

        column = SORT_COLUMNS[filters.sort_by]
        if filters.order == SortOrder.ASC:
            ordering = (column.asc(), Video.id.asc())
        else:
            ordering = (column.desc(), Video.id.desc())

        videos = self.db.execute(
            query
            .order_by(*ordering)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        ).scalars().all()

        total_pages = (total + filters.limit - 1) // filters.limit if total > 0 else 1

        return {
            "items": [video_to_dict(v) for v in videos],
            "total": total,
            "page": filters.page,
            "limit": filters.limit,
            "total_pages": total_pages,
        }
