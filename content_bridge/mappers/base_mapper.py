"""
Record mapper contract.

A mapper turns one decoded API record into one content artifact. The
orchestrator maps records one at a time so each document reaches the sink
before the next record is read.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

DocumentT = TypeVar("DocumentT")


class RecordMapper(ABC, Generic[DocumentT]):
    """Map raw API records (any JSON value) into ``DocumentT``."""

    @abstractmethod
    def map_record(self, record: Any) -> DocumentT:
        """
        Map a single record.

        Raises:
            TransformationException: The record cannot become a valid document.
        """
