"""Shared domain building blocks for taskr.

- Result monad for errors handed back as values
- TaskrError hierarchy raised by domain primitives

Example usage:
    >>> from taskr.domain.shared import Err, Ok, CycleError
    >>>
    >>> def checked_move(store, task_id, parent_id):
    ...     try:
    ...         store.move(task_id, parent_id)
    ...     except CycleError as exc:
    ...         return Err(exc)
    ...     return Ok(None)
"""

from taskr.domain.shared.errors import (
    CycleError,
    DecodeError,
    EmptyPathError,
    EmptySegmentError,
    ForestMismatchError,
    ImportLimitError,
    InvalidInputError,
    LockedError,
    MalformedPathError,
    PersistenceError,
    TaskNotFoundError,
    TaskrError,
)
from taskr.domain.shared.result import (
    Err,
    Ok,
    Result,
    is_err,
    is_ok,
)

__all__ = [
    # Result monad
    "Ok",
    "Err",
    "Result",
    "is_ok",
    "is_err",
    # Errors
    "TaskrError",
    "MalformedPathError",
    "EmptySegmentError",
    "EmptyPathError",
    "TaskNotFoundError",
    "CycleError",
    "ForestMismatchError",
    "LockedError",
    "DecodeError",
    "ImportLimitError",
    "InvalidInputError",
    "PersistenceError",
]
