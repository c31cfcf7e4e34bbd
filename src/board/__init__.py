"""Client-side board state: drag sessions and user notices.

Public API:
- DragSessionController: Runs one drag gesture at a time against a live list
- DragSession: The ephemeral state of one gesture
- DragState: Controller states
- DragOutcome: What a finished gesture did
- Notice: Transient user-facing message
"""

from src.board.notices import Notice, NoticeLevel
from src.board.session import (
    DragOutcome,
    DragSession,
    DragSessionController,
    DragState,
    DragStateError,
    PendingCommit,
)

__all__ = [
    "DragSessionController",
    "DragSession",
    "DragState",
    "DragStateError",
    "DragOutcome",
    "PendingCommit",
    "Notice",
    "NoticeLevel",
]
