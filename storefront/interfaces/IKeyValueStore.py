from abc import ABC, abstractmethod
from typing import Optional

class IKeyValueStore(ABC):
    """Named, serialized blobs kept on the shopper's side (cart, checkout form)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def clear(self, key: str) -> None:
        pass
