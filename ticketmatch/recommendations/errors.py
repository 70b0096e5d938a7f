from __future__ import annotations


class InvalidInputError(TypeError):
    """Raised when the engine receives an input of the wrong shape or type."""


class IndexUnavailableError(RuntimeError):
    """Raised by the index adapter when it is asked to search before it is ready."""


def check_k(k: object) -> int:
    if isinstance(k, bool) or not isinstance(k, int) or k < 0:
        raise InvalidInputError(f"k must be a non-negative integer, got {k!r}")
    return k
