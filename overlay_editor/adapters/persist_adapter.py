"""Persist adapter abstraction.

Receives exported PDF bytes and stores them somewhere (local filesystem,
object storage behind an HTTP API, ...). The editor core never retries;
retry policy belongs to the concrete adapter.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PersistResult:
    url: str
    filename: str
    owner_id: str
    size: int


class PersistAdapter(ABC):
    """Abstract sink for exported documents."""

    @abstractmethod
    def upload(self, data: bytes, filename: str, owner_id: str) -> PersistResult:
        """
        Persist an exported PDF.

        Args:
            data: PDF bytes
            filename: Original/display filename
            owner_id: Id of the owning user

        Returns:
            PersistResult with the URL the document is reachable under

        Raises:
            PersistError on any transport or storage failure
        """
        raise NotImplementedError
