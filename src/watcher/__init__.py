import logging

logger = logging.getLogger(__name__)

__all__ = ["logger"]
