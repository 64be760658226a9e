"""Tests for actor resolvers."""

import pytest

from docaudit.audit.identity import as_actor_resolver, static_actor


class TestStaticActor:
    @pytest.mark.asyncio
    async def test_returns_name(self) -> None:
        resolve = static_actor("admin")
        assert await resolve() == "admin"
        assert await resolve() == "admin"


class TestAsActorResolver:
    """Tests for as_actor_resolver."""

    @pytest.mark.asyncio
    async def test_wraps_name(self) -> None:
        """Plain strings become static resolvers."""
        resolve = as_actor_resolver("someuser")
        assert await resolve() == "someuser"

    def test_passes_resolver_through(self) -> None:
        """Callables are used as-is."""

        async def from_session() -> str:
            return "session-user"

        assert as_actor_resolver(from_session) is from_session

    def test_rejects_other_types(self) -> None:
        with pytest.raises(TypeError):
            as_actor_resolver(42)  # type: ignore[arg-type]
