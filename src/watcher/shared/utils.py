"""Shared utility functions"""
import random
import time

from .consts import MAX_SHEET_ID, SNAPSHOT_NAME_LENGTH, SNAPSHOT_NAME_LETTERS


def sleep_for(delay: float, message: str = "") -> None:
    """Sleep with optional log message"""
    from watcher import logger

    if message:
        logger.info(message)
    else:
        logger.info(f"Sleep for {delay} seconds")
    time.sleep(delay)


def random_sheet_name(length: int = SNAPSHOT_NAME_LENGTH) -> str:
    return "".join(random.choice(SNAPSHOT_NAME_LETTERS) for _ in range(length))


def random_sheet_id() -> int:
    return random.randint(1, MAX_SHEET_ID)
