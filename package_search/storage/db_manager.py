from abc import ABC, abstractmethod
from threading import Event
from typing import List, Optional, Sequence, Any

from package_search.domain.ordered_row import OrderedRow


class IndexDatabase(ABC):
    """
    Abstract base class for read-only access to the package index.
    """

    @abstractmethod
    def open(self) -> None:
        """Open the storage handle and verify it is reachable."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the storage handle."""
        pass

    @abstractmethod
    def fetch_rows(
        self,
        query: str,
        params: Sequence[Any] = (),
        cancel: Optional[Event] = None,
    ) -> List[OrderedRow]:
        """
        Execute a read query and capture every result row as an OrderedRow,
        columns in result-set order.

        When ``cancel`` is set while the query runs, execution is interrupted
        and QueryCancelledError is raised. Querying a handle that has not been
        opened, or has been closed, raises QueryExecutionError.
        """
        pass

    @abstractmethod
    def server_version(self) -> str:
        """Return the storage engine version string."""
        pass
