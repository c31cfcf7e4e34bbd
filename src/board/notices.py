"""Transient user-facing notices."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    """Severity of a notice."""

    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A short, non-blocking message shown to the user for a while."""

    message: str
    level: NoticeLevel = NoticeLevel.ERROR
    duration_seconds: float = 4.0
    record_id: int | None = None


Notifier = Callable[[Notice], None]


def log_notice(notice: Notice) -> None:
    """Default notifier: write the notice to the application log."""
    if notice.level is NoticeLevel.ERROR:
        logger.warning(notice.message)
    else:
        logger.info(notice.message)
