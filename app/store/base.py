"""ADBOARD — Abstract Record Store."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence


class RecordStore(ABC):
    """Generic table-oriented CRUD store.

    Core components receive a store instance instead of reaching for a
    global client, so the backing database can be swapped in tests.
    Tables: users, customers, metrics.
    """

    @abstractmethod
    def get(self, table: str, record_id: str) -> Any:
        """Return the record or raise NotFound."""
        ...

    @abstractmethod
    def list(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Any]:
        """Return records matching equality `filters`.

        A filter value of None matches NULL. `order_by` entries are field
        names, prefixed with "-" for descending order.
        """
        ...

    @abstractmethod
    def insert(self, table: str, record: Dict[str, Any]) -> Any:
        """Insert a record and return it as stored."""
        ...

    @abstractmethod
    def update(self, table: str, record_id: str, patch: Dict[str, Any]) -> Any:
        """Apply `patch` to an existing record and return it. Raises NotFound."""
        ...

    @abstractmethod
    def delete(self, table: str, record_id: str) -> None:
        """Delete a record. Raises NotFound."""
        ...
