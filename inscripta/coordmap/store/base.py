from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from inscripta.coordmap.store.models import CoordSystemRow, FeatureTableRow


class AbstractCoordSystemStore(ABC):
    """
    Persistence collaborator of a :class:`~inscripta.coordmap.registry.CoordSystemRegistry`. The registry reads
    everything from the store once, when it is built, and afterwards only writes through it.
    """

    @abstractmethod
    def fetch_coord_system_rows(self) -> Iterable[CoordSystemRow]:
        """All persisted coordinate systems, in load order"""

    @abstractmethod
    def fetch_feature_table_rows(self) -> Iterable[FeatureTableRow]:
        """All persisted feature table to coordinate system associations"""

    @abstractmethod
    def fetch_mapping_declarations(self) -> List[str]:
        """All declared ``asm|cmp`` assembly mappings"""

    @abstractmethod
    def insert_coord_system(self, name: str, version: str, rank: int, attrib: Optional[str]) -> int:
        """Persist a new coordinate system.

        Returns:
            The identifier assigned to the new coordinate system.
        """

    @abstractmethod
    def insert_feature_table(self, coord_system_id: int, table_name: str):
        """Persist a feature table association. Inserting an association that already exists is a no-op."""
