from abc import ABC, abstractmethod
from typing import List, Optional


class IKeyValueStorage(ABC):
    """Browser-style string key/value storage"""

    @abstractmethod
    def keys(self) -> List[str]:
        pass

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass
