#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Retry utilities - Re-runs a read-modify-write sequence when a save hits a stale version.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# retry_on_conflict: Executes an async operation, retrying on ConcurrencyConflict.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# logger: Logger instance.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# asyncio: Async sleep between attempts.
# logging: Logging.
# typing: Type hints.
# spellrank.config: Retry budget defaults.
# spellrank.exceptions: ConcurrencyConflict.

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from spellrank.config import get_settings
from spellrank.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_on_conflict(
    operation: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    label: str = "save",
    **kwargs: Any
) -> T:
    """
    Execute an async operation, re-running it when a store reports a stale write.

    The operation must redo its own loads so each attempt sees fresh versions.
    Any other exception propagates immediately.

    Args:
        operation: Async function to call
        *args: Positional arguments for operation
        max_retries: Maximum number of attempts (settings default)
        retry_delay: Delay between attempts in seconds (settings default)
        label: Description for logging
        **kwargs: Keyword arguments for operation

    Returns:
        Whatever the operation returns on its first successful attempt

    Raises:
        ConcurrencyConflict: The last conflict, once every attempt failed
    """
    settings = get_settings()
    if max_retries is None:
        max_retries = settings.conflict_max_retries
    if retry_delay is None:
        retry_delay = settings.conflict_retry_delay_seconds
    max_retries = max(1, max_retries)

    for attempt in range(max_retries - 1):
        try:
            result = await operation(*args, **kwargs)
            if attempt > 0:
                logger.info(f"{label} succeeded on attempt {attempt + 1}")
            return result
        except ConcurrencyConflict as e:
            logger.warning(f"{label} conflict: {e}, attempt {attempt + 1}/{max_retries}")

        if retry_delay > 0:
            await asyncio.sleep(retry_delay)

    # Final attempt: a conflict here is the caller's to handle
    try:
        result = await operation(*args, **kwargs)
    except ConcurrencyConflict as e:
        logger.error(f"{label} failed after {max_retries} attempts: {e}")
        raise
    if max_retries > 1:
        logger.info(f"{label} succeeded on attempt {max_retries}")
    return result
