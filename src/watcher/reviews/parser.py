import json
import re

from watcher.gitlab.models import MergeRequest
from watcher.sheet.cells import CellStatus

from . import logger
from .models import Reviewer, ReviewRequest

# [university] [first-last] group/task, names in ASCII letters and digits
TITLE_RE = re.compile(r"^\[(\w+)\] \[(\w+)-(\w+)\] (.+/.+)$", re.ASCII)

UNKNOWN_UNIVERSITY = "unknown"
PIPELINE_SUCCESS = "SUCCESS"


def parse_reviewers(raw: str) -> dict[str, Reviewer]:
    reviewers: dict[str, Reviewer] = {}
    for item in json.loads(raw or "[]"):
        reviewer = Reviewer.model_validate(item)
        logger.info(f"Found reviewer {reviewer.username}")
        reviewers[reviewer.username] = reviewer
    return reviewers


class TitleParser:
    def __init__(self, reviewers: dict[str, Reviewer]):
        self.reviewers = reviewers

    def parse(self, mr: MergeRequest) -> ReviewRequest:
        approved_by = []
        for user in mr.approvedBy.nodes:
            reviewer = self.reviewers.get(user.username)
            if reviewer is None:
                logger.warning(f"Unknown reviewer {user.username}")
                continue
            approved_by.append(reviewer)

        resolvable = [d for d in mr.discussions.nodes if d.resolvable]

        match = TITLE_RE.match(mr.title)
        if match is None:
            university = UNKNOWN_UNIVERSITY
            student = f"@{mr.author.username}"
            task = mr.title
        else:
            university = match.group(1)
            student = f"{match.group(2)} {match.group(3)}"
            task = match.group(4)

        return ReviewRequest(
            university=university,
            student=student,
            task=task,
            url=mr.webUrl,
            pipeline_status=mr.pipeline_status,
            merge_status=mr.mergeStatus,
            num_problems=len(resolvable),
            num_resolved_problems=sum(1 for d in resolvable if d.resolved),
            approved_by=approved_by,
        )


def classify(review: ReviewRequest) -> tuple[str, CellStatus]:
    """Summarize the review state as a cell text and status colour."""
    if review.approved_by:
        pseudonyms = "".join(r.pseudonym for r in review.approved_by)
        return f"Approved [{pseudonyms}]", CellStatus.SUCCESS

    if review.pipeline_status != PIPELINE_SUCCESS:
        return "Pipeline failed", CellStatus.FAILURE

    if review.num_problems > review.num_resolved_problems:
        return "Rejected", CellStatus.REJECTED

    if review.num_problems == 0:
        return "Pending", CellStatus.NEUTRAL

    return "Problems resolved", CellStatus.WARNING
