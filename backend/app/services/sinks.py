"""Fire-and-forget delivery to the notification and audit sinks."""

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def emit(db: Session, label: str, fn: Callable[..., Any], /, **kwargs: Any) -> None:
    """Call ``fn(**kwargs)``; log and discard any failure.

    Used only after the ledger write it describes has been committed, so the
    rollback here can never undo a charge.
    """
    try:
        fn(**kwargs)
    except Exception:
        logger.warning("%s failed; continuing", label, exc_info=True)
        db.rollback()
