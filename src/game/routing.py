"""
Map an incoming actor to the game it is playing.

A private chat is shared by every game its actor ever joined, so only the latest join is tracked.
"""

from typing import Optional

from src.core.exceptions import SessionNotFoundError
from src.game.registry import SessionRegistry
from src.game.session import GameSession


class ActorRoutingTable:
    """actor id -> game key. Last join wins."""

    def __init__(self) -> None:
        self._routes: dict[str, str] = {}

    def attach(self, actor_id: str, key: str) -> None:
        self._routes[actor_id] = key

    def get(self, actor_id: str) -> Optional[str]:
        return self._routes.get(actor_id)

    def detach_key(self, key: str) -> list[str]:
        """Forget every actor routed to `key`. Returns the detached actors."""
        detached = [actor for actor, routed in self._routes.items() if routed == key]
        for actor in detached:
            del self._routes[actor]
        return detached

    def __len__(self) -> int:
        return len(self._routes)


def resolve_session_for_actor(
    registry: SessionRegistry,
    routing: ActorRoutingTable,
    actor_id: str,
    key_hint: Optional[str] = None,
) -> GameSession:
    """
    1. key hint (the chat the action came from) names a live session
    2. the actor is itself the public identity of a session (acting in the channel)
    3. the routing table entry of the actor
    """
    for key in (key_hint, actor_id):
        if key is not None and registry.contains(key):
            return registry.get(key)

    routed_key = routing.get(actor_id)
    if routed_key is not None and registry.contains(routed_key):
        return registry.get(routed_key)

    raise SessionNotFoundError(f"No active game found for {actor_id!r}.")
