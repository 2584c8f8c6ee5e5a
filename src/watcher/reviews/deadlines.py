import requests
import yaml
from pydantic import TypeAdapter, ValidationError

from watcher.shared.decorators import retry_on_fail
from watcher.shared.exceptions import DeadlinesError

from . import logger
from .models import DeadlineGroup

_deadlines_adapter = TypeAdapter(list[DeadlineGroup])


def parse_tasks(text: str) -> list[str]:
    """Return task names of a deadlines yaml in file order."""
    try:
        groups = _deadlines_adapter.validate_python(yaml.safe_load(text) or [])
    except (yaml.YAMLError, ValidationError) as e:
        logger.warning(f"Failed to decode deadlines: {e}")
        raise DeadlinesError(f"Failed to decode deadlines: {e}") from e

    return [task.task for group in groups for task in group.tasks]


@retry_on_fail(max_retries=3, sleep_interval=10)
def load_tasks(deadlines_url: str, timeout: float = 30) -> list[str]:
    res = requests.get(deadlines_url, timeout=timeout)
    res.raise_for_status()
    return parse_tasks(res.text)
