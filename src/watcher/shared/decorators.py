import functools
import time

from requests.exceptions import RequestException


def retry_on_fail(
    max_retries: int = 3,
    sleep_interval: float = 10,
    exceptions: tuple[type[Exception], ...] = (RequestException,),
):
    """Retry the wrapped call on the given exceptions, re-raising the last one."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            from watcher import logger

            for attempt in range(1, max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(
                            f"{func.__name__} failed after {max_retries} attempts: {e}"
                        )
                        raise
                    logger.warning(
                        f"{func.__name__} failed ({attempt}/{max_retries}): {e}. "
                        f"Retry in {sleep_interval}s"
                    )
                    time.sleep(sleep_interval)

        return wrapper

    return decorator
