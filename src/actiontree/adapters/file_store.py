"""File-based action storage adapter."""

import json
import logging
from pathlib import Path

from actiontree.core.actions import Action, ActionTreeError, index_actions

logger = logging.getLogger(__name__)


class StoreError(ActionTreeError):
    """Raised when the actions file cannot be read."""

    pass


class FileActionStore:
    """
    JSON file action storage.

    Implements ActionRepository protocol. The file holds a list of actions in
    the API's camelCase shape; a missing file is an empty collection.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def fetch_all(self) -> list[Action]:
        """Read every action from the file."""
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"{self.path} is not valid JSON: {e}") from e

        if isinstance(data, dict):
            data = data.get("actions", [])
        try:
            actions = [Action.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed action in {self.path}: {e}") from e
        logger.debug("Loaded %d action(s) from %s", len(actions), self.path)
        return actions

    def save_all(self, actions: list[Action]) -> None:
        """Write the whole collection, replacing the file atomically."""
        index_actions(actions)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps([a.to_dict() for a in actions], indent=2, ensure_ascii=False))
        tmp.replace(self.path)
        logger.debug("Saved %d action(s) to %s", len(actions), self.path)

