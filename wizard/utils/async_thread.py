import asyncio
from functools import partial, wraps
from typing import Any, Awaitable, Callable, TypeVar


T = TypeVar("T")


def run_in_thread(func: Callable[..., T]) -> Callable[..., Awaitable[T]]:
    """Run a blocking function in the default executor of the running event loop."""

    @wraps(func)
    async def inner(*args: Any, **kwargs: Any) -> T:
        return await asyncio.get_running_loop().run_in_executor(None, partial(func, *args, **kwargs))

    return inner
