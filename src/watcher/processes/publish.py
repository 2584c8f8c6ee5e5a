from watcher.gitlab.models import MergeRequest
from watcher.reviews.models import ReviewRequest
from watcher.reviews.parser import TitleParser, classify
from watcher.shared.consts import MERGE_REQUESTS_COLUMNS, STUDENT_COLUMN, TASK_COLUMN
from watcher.sheet.cells import Cell
from watcher.sheet.client import SheetsClient
from watcher.sheet.queries import InsertQuery, SortQuery
from watcher.sheet.snapshot import Snapshot, run_with_snapshot

from . import logger

ParsedMergeRequest = tuple[MergeRequest, ReviewRequest]


def parse_merge_requests(
    merge_requests: list[MergeRequest], parser: TitleParser
) -> list[ParsedMergeRequest]:
    return [(mr, parser.parse(mr)) for mr in merge_requests]


def group_by_student(
    parsed: list[ParsedMergeRequest],
) -> dict[str, list[ReviewRequest]]:
    reviews_by_student: dict[str, list[ReviewRequest]] = {}
    for _, review in parsed:
        reviews_by_student.setdefault(review.student, []).append(review)
    return reviews_by_student


def merge_requests_query(parsed: list[ParsedMergeRequest]) -> InsertQuery:
    query = InsertQuery().into(*MERGE_REQUESTS_COLUMNS)
    for mr, review in parsed:
        query.values(
            review.student,
            review.task,
            mr.title,
            mr.createdAt,
            mr.mergeStatus,
            mr.pipeline_status,
            mr.webUrl,
        )
    return query


def reviews_query(
    tasks: list[str], reviews_by_student: dict[str, list[ReviewRequest]]
) -> InsertQuery:
    """One row per student, one status cell per task."""
    task_to_index = {task: i for i, task in enumerate(tasks)}
    query = InsertQuery().into(STUDENT_COLUMN, *tasks)

    for student in sorted(reviews_by_student):
        values: list = [student] + [None] * len(tasks)

        for review in reviews_by_student[student]:
            index = task_to_index.get(review.task)
            if index is None:
                logger.debug(f"Skip {review.url}: unknown task {review.task}")
                continue

            text, status = classify(review)
            values[1 + index] = Cell(text=text, hyperlink=review.url, status=status)

        query.values(*values)

    return query


def replace_table(snapshot: Snapshot, query: InsertQuery, sort: SortQuery) -> None:
    snapshot.delete()
    snapshot.insert(query)
    # An empty insert writes no header, so there is nothing to sort by
    if query.rows:
        snapshot.sort(sort)


def publish_merge_requests(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_name: str,
    parsed: list[ParsedMergeRequest],
) -> None:
    query = merge_requests_query(parsed)
    sort = SortQuery(by=[STUDENT_COLUMN, TASK_COLUMN])

    run_with_snapshot(
        client, spreadsheet_id, sheet_name, lambda s: replace_table(s, query, sort)
    )
    logger.info(f"Successfully updated {sheet_name} table")


def publish_reviews(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_name: str,
    tasks: list[str],
    reviews_by_student: dict[str, list[ReviewRequest]],
) -> None:
    query = reviews_query(tasks, reviews_by_student)
    sort = SortQuery(by=[STUDENT_COLUMN])

    run_with_snapshot(
        client, spreadsheet_id, sheet_name, lambda s: replace_table(s, query, sort)
    )
    logger.info(f"Successfully updated {sheet_name} table")
