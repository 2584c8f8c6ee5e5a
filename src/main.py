from pathlib import Path

from watcher import logger
from watcher.gitlab import GitLabClient
from watcher.processes import (
    group_by_student,
    parse_merge_requests,
    publish_merge_requests,
    publish_reviews,
)
from watcher.reviews import TitleParser, load_tasks, parse_reviewers
from watcher.shared.config import Config
from watcher.shared.logger import init_logging
from watcher.shared.utils import sleep_for
from watcher.sheet import SheetsClient


class Daemon:
    def __init__(
        self,
        config: Config,
        gitlab: GitLabClient,
        sheets: SheetsClient,
    ):
        self.config = config
        self.gitlab = gitlab
        self.sheets = sheets
        self.parser = TitleParser(parse_reviewers(config.ELIGIBLE_REVIEWERS))

    @classmethod
    def from_config(cls, config: Config) -> "Daemon":
        gitlab = GitLabClient(config.GITLAB_URL, config.GITLAB_TOKEN)
        sheets = SheetsClient(Path(config.KEYS_PATH))
        return cls(config=config, gitlab=gitlab, sheets=sheets)

    def run_iteration(self) -> None:
        tasks = list(dict.fromkeys(load_tasks(self.config.DEADLINES_URL)))
        for task in tasks:
            logger.debug(f"Task {task}")
        logger.info(f"Found {len(tasks)} tasks")

        group = self.gitlab.list_group_merge_requests(
            self.config.GITLAB_GROUP, self.config.GITLAB_LABEL
        )
        merge_requests = group.mergeRequests.nodes
        logger.info(f"Found {len(merge_requests)} merge requests")
        parsed = parse_merge_requests(merge_requests, self.parser)

        publish_merge_requests(
            self.sheets,
            self.config.SHEET_ID,
            self.config.MERGE_REQUESTS_SHEET_NAME,
            parsed,
        )

        publish_reviews(
            self.sheets,
            self.config.SHEET_ID,
            self.config.REVIEWS_SHEET_NAME,
            tasks,
            group_by_student(parsed),
        )

    def run_forever(self) -> None:
        while True:
            try:
                self.run_iteration()
                logger.info("=== ITERATION COMPLETED ===")
            except Exception:
                logger.exception("Iteration failed")

            sleep_for(self.config.ITERATION_INTERVAL)


def main():
    config = Config.from_env()
    init_logging(config.LOG_LEVEL)
    logger.info(f"Initialized logging using {config.LOG_LEVEL} level")

    daemon = Daemon.from_config(config)
    logger.info("=== STARTING WATCHER ===")
    daemon.run_forever()


if __name__ == "__main__":
    main()
