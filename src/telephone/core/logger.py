import contextvars
import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

LOGGER_NAME = "telephone"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | call=%(call_id)s | %(message)s"

# Id of the dispatch currently running in this context, "-" outside one
_CALL_ID: contextvars.ContextVar[str] = contextvars.ContextVar("call_id", default="-")


class _CallIdFilter(logging.Filter):
    """Stamps each record with the call id of the dispatch that emitted it."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.call_id = _CALL_ID.get()
        return True


def configure_root_logger(level: str = "INFO") -> None:
    """
    Attach a stdout handler to the ``telephone`` logger and set its level.

    Used by the CLI. Embedding applications keep their own logging setup;
    the library itself never adds handlers or changes levels.
    Calling it again only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(isinstance(f, _CallIdFilter) for h in logger.handlers for f in h.filters):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(_CallIdFilter())
    logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)


def current_call_id() -> str:
    return _CALL_ID.get()


@contextmanager
def call_id_scope(call_id: Optional[str] = None) -> Iterator[str]:
    """Bind a call id (a fresh one unless given) for the duration of the block."""
    call_id = call_id or uuid.uuid4().hex[:12]
    token = _CALL_ID.set(call_id)
    try:
        yield call_id
    finally:
        _CALL_ID.reset(token)
