from typing import Final

GITLAB_GRAPHQL_PATH: Final[str] = "/api/graphql"
GITLAB_PAGE_SIZE: Final[int] = 100

SNAPSHOT_NAME_LENGTH: Final[int] = 16
SNAPSHOT_NAME_LETTERS: Final[str] = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)
# Sheet ids are signed 32-bit integers on the API side
MAX_SHEET_ID: Final[int] = 2**31 - 1

MERGE_REQUESTS_COLUMNS: Final[tuple[str, ...]] = (
    "Student",
    "Task",
    "Merge request title",
    "Created at",
    "Merge status",
    "Pipeline status",
    "Url",
)
STUDENT_COLUMN: Final[str] = "Student"
TASK_COLUMN: Final[str] = "Task"
