import logging

logger = logging.getLogger(__name__)

from .publish import (
    group_by_student,
    merge_requests_query,
    parse_merge_requests,
    publish_merge_requests,
    publish_reviews,
    replace_table,
    reviews_query,
)

__all__ = [
    "group_by_student",
    "merge_requests_query",
    "parse_merge_requests",
    "publish_merge_requests",
    "publish_reviews",
    "replace_table",
    "reviews_query",
    "logger",
]
