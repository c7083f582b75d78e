"""Action repository interface."""

from typing import Protocol

from actiontree.core.actions import Action


class ActionRepository(Protocol):
    """
    Interface for reading and writing the action collection.

    A successful save must leave a collection that satisfies the forest and
    sibling-order invariants on the next fetch.
    """

    def fetch_all(self) -> list[Action]:
        """Fetch every action, in any order."""
        ...

    def save_all(self, actions: list[Action]) -> None:
        """Replace the stored collection."""
        ...
