import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(filename)s:%(lineno)d %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def init_logging(level: str = "INFO") -> None:
    """Configure the root logger.

    Raises:
        ValueError: If level is not a known logging level name.
    """
    log_level = logging.getLevelName(level.strip().upper() or "INFO")
    if not isinstance(log_level, int):
        raise ValueError(f"failed to parse log level: {level}")

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True,
    )
