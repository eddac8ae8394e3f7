"""
Logging infrastructure.

Stream logger factory for services, plus an adapter that tags every
line of a batch run with its ExecutionID.
"""
import logging
from typing import Any, MutableMapping, Tuple


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Get logger instance.

    Args:
        name: Logger name (usually module name)
        level: Level applied when the logger is first configured

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger


class ExecutionLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with ``[<execution id>]``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['execution_id']}] {msg}", kwargs


def execution_logger(logger: logging.Logger, execution_id: Any) -> ExecutionLogAdapter:
    """Wrap ``logger`` for one batch run."""
    return ExecutionLogAdapter(logger, {"execution_id": str(execution_id)})
