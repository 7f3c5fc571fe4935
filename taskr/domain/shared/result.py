"""Result monad for explicit error handling at layer boundaries.

Domain primitives raise TaskrError subclasses. Storage and session code
hand those failures back as values instead, so callers can branch on
them without try/except:

    >>> result = session.add_path("/Work/Report")
    >>> if is_ok(result):
    ...     print(f"Focused: {result.value.leaf.name}")
    ... else:
    ...     print(f"Rejected: {result.error}")
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying an error (a message or a TaskrError)."""

    error: E


# Using Union here as TypeVar aliases don't work with | syntax at runtime
Result = Union[Ok[T], Err[E]]  # noqa: UP007


def is_ok(result: Ok[T] | Err[E]) -> bool:
    """Check if a result is successful."""
    return isinstance(result, Ok)


def is_err(result: Ok[T] | Err[E]) -> bool:
    """Check if a result is an error."""
    return isinstance(result, Err)
