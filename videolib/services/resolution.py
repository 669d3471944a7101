"""
Resolution Classes

Buckets a video's pixel height into sd/hd/fullhd/2k/4k/other. Upper
bounds are inclusive, so 720 is "hd" and 721 is "fullhd".
"""
from typing import Optional

from sqlalchemy import case, func

from videolib.schemas.common import ResolutionClass

# (inclusive max height, class), checked in order
RESOLUTION_BUCKETS = [
    (480, ResolutionClass.SD),
    (720, ResolutionClass.HD),
    (1080, ResolutionClass.FULLHD),
    (1440, ResolutionClass.QHD),
    (2160, ResolutionClass.UHD),
]


def resolution_class(height: Optional[int]) -> ResolutionClass:
    """Resolution class for a pixel height (unknown height counts as 0)."""
    height = height or 0
    for max_height, label in RESOLUTION_BUCKETS:
        if height <= max_height:
            return label
    return ResolutionClass.OTHER


def resolution_class_expr(height_column):
    """Same bucketing as a SQL CASE expression over a height column."""
    height = func.coalesce(height_column, 0)
    return case(
        *[(height <= max_height, label.value) for max_height, label in RESOLUTION_BUCKETS],
        else_=ResolutionClass.OTHER.value,
    )
