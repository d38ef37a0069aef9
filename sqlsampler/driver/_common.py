"""Cleanup helpers shared by the driver layer."""

from typing import Any

from sqlsampler.exceptions import ResourceReleaseError
from sqlsampler.utils.logging import get_logger

__all__ = ("close_quietly", "release")

logger = get_logger("sqlsampler.driver")


def release(resource: Any, kind: str = "Statement") -> None:
    """Close ``resource``.

    Args:
        resource: Anything with a ``close()`` method, or None.
        kind: What the resource is, for the error message.

    Raises:
        ResourceReleaseError: If closing fails.
    """
    if resource is None:
        return
    try:
        resource.close()
    except Exception as e:
        msg = f"Error closing {kind} {resource!r}"
        raise ResourceReleaseError(msg) from e


def close_quietly(resource: Any, kind: str = "Statement") -> bool:
    """Close ``resource``, logging instead of raising on failure.

    Returns:
        True if the resource was closed (or was None).
    """
    try:
        release(resource, kind)
    except ResourceReleaseError as e:
        logger.warning("%s", e, exc_info=e.__cause__)
        return False
    return True
