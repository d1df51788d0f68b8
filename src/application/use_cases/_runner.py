"""Runs blocking collaborator calls off the event loop."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Dict, TypeVar

from coaching.errors import CoachingError

T = TypeVar("T")

# Thread pool for running blocking I/O operations
_executor = ThreadPoolExecutor(max_workers=4)


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(_executor, partial(func, *args, **kwargs))


def error_fields(exc: CoachingError) -> Dict[str, Any]:
    return {
        "success": False,
        "error": exc.user_message,
        "error_code": exc.code,
        "details": exc.details,
    }
