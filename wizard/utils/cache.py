import json
from functools import wraps
from inspect import signature
from typing import Any, Awaitable, Callable, TypeVar, cast

from ..logger import get_logger
from ..redis import redis
from ..settings import settings


FUNC = TypeVar("FUNC", bound=Callable[..., Awaitable[Any]])

logger = get_logger(__name__)


def redis_cached(key: str, *args: str) -> Callable[[FUNC], FUNC]:
    """
    Cache the json serializable result of a coroutine in redis.

    The cache key is built from `key` and the values of the named arguments `args`.
    """

    def deco(func: FUNC) -> FUNC:
        sig = signature(func)

        @wraps(func)
        async def inner(*_args: Any, **_kwargs: Any) -> Any:
            bound = sig.bind(*_args, **_kwargs)
            bound.apply_defaults()
            key_str = ":".join([f"{key}:cache", func.__name__, *(str(bound.arguments[arg]) for arg in args)])

            if (value := await redis.get(key_str)) is not None:
                return json.loads(value)

            result = await func(*_args, **_kwargs)
            await redis.setex(key_str, settings.cache_ttl, json.dumps(result))
            await redis.sadd(f"{key}:cache:keys", key_str)
            return result

        return cast(FUNC, inner)

    return deco


async def clear_cache(key: str) -> None:
    keys = await redis.smembers(f"{key}:cache:keys")
    if keys:
        await redis.delete(*keys)
    await redis.delete(f"{key}:cache:keys")
    logger.debug("cleared cache %s (%d entries)", key, len(keys))
