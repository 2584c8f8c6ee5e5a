import logging

logger = logging.getLogger(__name__)

from .client import GitLabClient
from .models import (
    Discussion,
    Group,
    MergeRequest,
    MergeRequestCollection,
    Pipeline,
    User,
)

__all__ = [
    "GitLabClient",
    "Discussion",
    "Group",
    "MergeRequest",
    "MergeRequestCollection",
    "Pipeline",
    "User",
    "logger",
]
