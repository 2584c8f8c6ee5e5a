"""
End-to-end tests for publishing merge requests into sheets.
"""

import logging
from unittest.mock import patch

from watcher.gitlab.models import MergeRequest
from watcher.processes.publish import (
    group_by_student,
    merge_requests_query,
    parse_merge_requests,
    publish_merge_requests,
    publish_reviews,
    reviews_query,
)
from watcher.reviews.models import Reviewer
from watcher.reviews.parser import TitleParser
from watcher.sheet.cells import Cell, CellStatus


def make_mr(title: str, author: str = "someone", **overrides) -> MergeRequest:
    data = {
        "title": title,
        "author": {"name": author, "username": author},
        "createdAt": "2024-03-01T10:00:00Z",
        "mergeStatus": "can_be_merged",
        "approvedBy": {"nodes": []},
        "headPipeline": {"status": "SUCCESS"},
        "webUrl": f"https://gitlab.com/mr/{abs(hash(title))}",
        "discussions": {"nodes": []},
    }
    data.update(overrides)
    return MergeRequest.model_validate(data)


PARSER = TitleParser({"alice": Reviewer(username="alice", pseudonym="A")})

MERGE_REQUESTS = [
    make_mr("[hse] [Petr-Petrov] basics/sum"),
    make_mr("[hse] [Anna-Smirnova] basics/hello", approvedBy={"nodes": [{"username": "alice"}]}),
    make_mr("[hse] [Anna-Smirnova] basics/sum", headPipeline={"status": "FAILED"}),
    make_mr("[hse] [Anna-Smirnova] extra/unknown"),
]

PARSED = parse_merge_requests(MERGE_REQUESTS, PARSER)

TASKS = ["basics/hello", "basics/sum"]


class TestParse:
    def test_each_merge_request_is_parsed_once(self):
        with patch.object(PARSER, "parse", wraps=PARSER.parse) as parse:
            parsed = parse_merge_requests(MERGE_REQUESTS, PARSER)
            merge_requests_query(parsed)
            group_by_student(parsed)

        assert parse.call_count == len(MERGE_REQUESTS)

    def test_unknown_reviewer_warned_once(self, caplog):
        mr = make_mr("[hse] [Petr-Petrov] basics/sum", approvedBy={"nodes": [{"username": "mallory"}]})

        with caplog.at_level(logging.WARNING):
            parsed = parse_merge_requests([mr], PARSER)
            merge_requests_query(parsed)
            group_by_student(parsed)

        assert [r.getMessage() for r in caplog.records] == ["Unknown reviewer mallory"]

    def test_group_by_student_keeps_order(self):
        grouped = group_by_student(PARSED)
        assert list(grouped) == ["Petr Petrov", "Anna Smirnova"]
        assert [r.task for r in grouped["Anna Smirnova"]] == ["basics/hello", "basics/sum", "extra/unknown"]


class TestReviewsQuery:
    def test_one_row_per_student_sorted(self):
        query = reviews_query(TASKS, group_by_student(PARSED))

        assert query.fields == ["Student", "basics/hello", "basics/sum"]
        assert [row[0] for row in query.rows] == ["Anna Smirnova", "Petr Petrov"]

        anna = query.rows[0]
        assert anna[1] == Cell(text="Approved [A]", hyperlink=MERGE_REQUESTS[1].webUrl, status=CellStatus.SUCCESS)
        assert anna[2].status is CellStatus.FAILURE

        petr = query.rows[1]
        assert petr[1] is None
        assert petr[2].text == "Pending"


class TestPublish:
    def test_merge_requests_table(self, client, spreadsheet):
        spreadsheet.add_sheet(1, "Merge Requests", [["Stale"], ["row"]])

        publish_merge_requests(client, spreadsheet.id, "Merge Requests", PARSED)

        values = spreadsheet.sheets[1].values()
        assert values[0] == [
            "Student", "Task", "Merge request title", "Created at",
            "Merge status", "Pipeline status", "Url",
        ]
        assert [(row[0], row[1]) for row in values[1:]] == [
            ("Anna Smirnova", "basics/hello"),
            ("Anna Smirnova", "basics/sum"),
            ("Anna Smirnova", "extra/unknown"),
            ("Petr Petrov", "basics/sum"),
        ]
        assert list(spreadsheet.sheets) == [1]

    def test_reviews_table(self, client, spreadsheet):
        spreadsheet.add_sheet(2, "Reviews")

        publish_reviews(client, spreadsheet.id, "Reviews", TASKS, group_by_student(PARSED))

        values = spreadsheet.sheets[2].values()
        assert values[0] == ["Student", "basics/hello", "basics/sum"]
        assert values[1][0] == "Anna Smirnova"
        assert values[1][1].startswith('=HYPERLINK("https://gitlab.com/mr/')
        assert values[2] == ["Petr Petrov", "", values[2][2]]
        assert list(spreadsheet.sheets) == [2]

    def test_no_merge_requests_clears_merge_requests_table(self, client, spreadsheet):
        spreadsheet.add_sheet(1, "Merge Requests", [["Student", "Task"], ["Stale", "row"]])

        publish_merge_requests(client, spreadsheet.id, "Merge Requests", [])

        assert spreadsheet.sheets[1].values() == []
        assert list(spreadsheet.sheets) == [1]

    def test_no_merge_requests_clears_reviews_table(self, client, spreadsheet):
        spreadsheet.add_sheet(2, "Reviews", [["Student", "t"], ["Stale", "row"]])

        publish_reviews(client, spreadsheet.id, "Reviews", ["t"], {})

        assert spreadsheet.sheets[2].values() == []
        assert list(spreadsheet.sheets) == [2]
