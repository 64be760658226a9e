"""Actor resolution for audit entries.

An actor resolver is any zero-argument coroutine function returning the
name of the user performing the change. Callers typically read it from
their session or request context.
"""

from collections.abc import Awaitable, Callable

ActorResolver = Callable[[], Awaitable[str]]


def static_actor(name: str) -> ActorResolver:
    """Build a resolver that always reports the same user."""

    async def resolve() -> str:
        return name

    return resolve


def as_actor_resolver(actor: str | ActorResolver) -> ActorResolver:
    """Accept either a fixed user name or a resolver.

    Raises:
        TypeError: If actor is neither a string nor callable
    """
    if isinstance(actor, str):
        return static_actor(actor)
    if callable(actor):
        return actor
    raise TypeError(f"actor must be a name or a resolver, got {type(actor).__name__}")
