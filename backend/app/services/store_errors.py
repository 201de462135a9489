from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging

from app.core.exceptions import InvalidRequestError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

CLASSIFIED_ERRORS = (NotFoundError, InvalidRequestError, StoreError)


@contextmanager
def store_operation(operation: str) -> Iterator[None]:
    """Turn any unclassified failure inside the block into a ``StoreError``.

    NotFound, InvalidRequest and already-raised Store errors pass through
    untouched.
    """
    try:
        yield
    except CLASSIFIED_ERRORS:
        raise
    except Exception as exc:
        logger.exception("STORE OPERATION FAILED | operation=%s", operation)
        raise StoreError(f"Error while {operation}") from exc
