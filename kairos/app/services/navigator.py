from abc import ABC, abstractmethod


class INavigator(ABC):
    """Navigation seam for the client layer"""

    location: str

    @abstractmethod
    def hard_reload(self, path: str) -> None:
        """Full navigation to path; no in-memory client state survives it"""
        pass
