from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict


class Sink(ABC):
    """
    Receives normalized listing dicts (NormalizedListing.to_dict()) and, once
    per run, the summary object.
    """

    @abstractmethod
    def write(self, record: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def write_summary(self, summary: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...
