from typing import Dict, List, Optional

from kairos.app.services.storage import IKeyValueStorage


class MemoryStorage(IKeyValueStorage):
    """Session-scoped storage; gone when the process exits"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
