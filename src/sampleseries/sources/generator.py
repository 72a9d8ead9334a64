from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterator, Optional


class TimestampGenerator(ABC):
    """Base class for in-process timestamp generators.

    `generate()` lazily yields timestamps in generation order; `count()`
    reports how many it will yield when that is known up front.
    """

    @abstractmethod
    def generate(self) -> Iterator[datetime]:
        pass

    def count(self) -> Optional[int]:
        return None

    def __iter__(self) -> Iterator[datetime]:
        return self.generate()
