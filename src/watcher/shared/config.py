import os
from dotenv import load_dotenv
from pydantic import BaseModel


class Config(BaseModel):
    # Keys
    KEYS_PATH: str = "keys"

    # Sheets
    SHEET_ID: str
    MERGE_REQUESTS_SHEET_NAME: str = "Merge Requests"
    REVIEWS_SHEET_NAME: str = "Reviews"

    # GitLab
    GITLAB_URL: str = "https://gitlab.com"
    GITLAB_TOKEN: str
    GITLAB_GROUP: str
    GITLAB_LABEL: str = "hse"

    # Deadlines yaml with the list of graded tasks
    DEADLINES_URL: str

    # JSON list of {"username": ..., "pseudonym": ...}
    ELIGIBLE_REVIEWERS: str = "[]"

    # Sleep between iterations in seconds
    ITERATION_INTERVAL: int = 60

    LOG_LEVEL: str = "INFO"

    @staticmethod
    def from_env(dotenv_path: str = "settings.env") -> "Config":
        load_dotenv(dotenv_path)
        return Config.model_validate(os.environ)
