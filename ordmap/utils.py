import operator


class PreconditionViolation(IndexError):
    """
    Raised when a positional operation receives an index outside the valid range.

    This signals a programming error in the caller; the container is left untouched.
    """


class InconsistencyError(Exception):
    """
    Raised when the key order and the value store of an `OrderedMap` disagree.
    """


class IgnoredIndexWarning(UserWarning):
    """
    Emmited when a positional write targets a key that already exists elsewhere in the map
    """


def check_position(index, size: int, *, allow_end: bool = False) -> int:
    """Validate a position against a container of length `size`.

    Negative positions are rejected rather than counted from the end.
    """
    index = operator.index(index)
    upper = size if allow_end else size - 1
    if not 0 <= index <= upper:
        if size == 0 and not allow_end:
            raise PreconditionViolation(f"index {index} out of range for an empty map")
        raise PreconditionViolation(
            f"index {index} out of range [0, {upper}] for a map of length {size}"
        )
    return index
