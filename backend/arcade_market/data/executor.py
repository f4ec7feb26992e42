"""
Storage executor interface.

One implementation per backing store; the application receives exactly one
instance at startup and never asks which one it got.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from arcade_market.data.spec import QuerySpec, Result

Record = Dict[str, Any]


class Executor(ABC):
    """Runs query specs against a concrete store and returns result envelopes."""

    name: str = "abstract"

    async def initialize(self) -> None:
        """Prepare the store (e.g. create the schema). No-op by default."""

    async def close(self) -> None:
        """Release connections. No-op by default."""

    @abstractmethod
    async def query(self, spec: QuerySpec) -> Result:
        """Select rows matching ``spec``."""

    @abstractmethod
    async def insert(
        self, collection: str, records: List[Record], returning: Optional[str]
    ) -> Result:
        """Insert ``records``; return them (projected) only when ``returning`` is set."""

    @abstractmethod
    async def update(
        self, spec: QuerySpec, patch: Record, returning: Optional[str]
    ) -> Result:
        """Apply ``patch`` to rows matching ``spec``."""

    @abstractmethod
    async def delete(self, spec: QuerySpec, returning: Optional[str]) -> Result:
        """Delete rows matching ``spec``."""

    @abstractmethod
    async def replace(
        self, spec: QuerySpec, records: List[Record], returning: Optional[str]
    ) -> Result:
        """Delete rows matching ``spec`` and insert ``records`` as one unit."""
