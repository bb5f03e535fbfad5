import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from kairos.app.services.storage import IKeyValueStorage

logger = logging.getLogger(__name__)


class JsonFileStorage(IKeyValueStorage):
    """
    Durable storage backed by a JSON file.

    The whole file is rewritten on every mutation; it only ever holds a few
    small keys.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._items: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as r_file:
                data = json.load(r_file)
        except (OSError, ValueError) as exc:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {exc}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as w_file:
            json.dump(self._items, w_file)

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if key in self._items:
            del self._items[key]
            self._flush()
