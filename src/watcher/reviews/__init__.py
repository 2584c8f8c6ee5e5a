import logging

logger = logging.getLogger(__name__)

from .deadlines import load_tasks, parse_tasks
from .models import Reviewer, ReviewRequest
from .parser import TitleParser, classify, parse_reviewers

__all__ = [
    "load_tasks",
    "parse_tasks",
    "Reviewer",
    "ReviewRequest",
    "TitleParser",
    "classify",
    "parse_reviewers",
    "logger",
]
