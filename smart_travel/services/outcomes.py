"""
Stage outcomes - Tagged results for every fallible pipeline stage.

A stage returns ``Valid`` when it produced a validated value. ``Invalid``
(the capability answered but the output failed parsing or validation) and
``Unavailable`` (the capability is absent, failed, or timed out) form the
degraded branch; the caller decides which fallback to substitute.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    raw: str
    error: str


@dataclass(frozen=True)
class Unavailable:
    reason: str


Degraded = Union[Invalid, Unavailable]
StageResult = Union[Valid[T], Invalid, Unavailable]


def value_or(result: "StageResult[T]", fallback: T) -> T:
    """Unwrap a valid result, otherwise return the fallback."""
    if isinstance(result, Valid):
        return result.value
    return fallback


def describe(result: "StageResult") -> str:
    """Short human-readable label used in log lines."""
    if isinstance(result, Valid):
        return "valid"
    if isinstance(result, Invalid):
        return f"invalid output ({result.error})"
    return f"unavailable ({result.reason})"
