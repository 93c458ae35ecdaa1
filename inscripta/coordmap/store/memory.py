"""
In-memory implementation of :class:`~inscripta.coordmap.store.base.AbstractCoordSystemStore`. It can be populated
directly or from a JSON document matching :class:`~inscripta.coordmap.store.models.CoordSystemConfigModel`.
"""
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union, Dict, Any

from marshmallow import ValidationError

from inscripta.coordmap.exc import ConfigurationError
from inscripta.coordmap.store.base import AbstractCoordSystemStore
from inscripta.coordmap.store.models import CoordSystemRow, FeatureTableRow, CoordSystemConfigModel

logger = logging.getLogger(__name__)


class InMemoryCoordSystemStore(AbstractCoordSystemStore):
    def __init__(
        self,
        coord_systems: Optional[Iterable[CoordSystemRow]] = None,
        feature_tables: Optional[Iterable[FeatureTableRow]] = None,
        assembly_mappings: Optional[Iterable[str]] = None,
    ):
        self.coord_systems: List[CoordSystemRow] = list(coord_systems) if coord_systems else []
        self.feature_tables: List[FeatureTableRow] = list(feature_tables) if feature_tables else []
        self.assembly_mappings: List[str] = list(assembly_mappings) if assembly_mappings else []

    def __repr__(self):
        return "<InMemoryCoordSystemStore: {} coord systems, {} feature tables, {} mappings>".format(
            len(self.coord_systems), len(self.feature_tables), len(self.assembly_mappings)
        )

    @staticmethod
    def from_model(model: CoordSystemConfigModel) -> "InMemoryCoordSystemStore":
        return InMemoryCoordSystemStore(model.coord_systems, model.feature_tables, model.assembly_mappings)

    @staticmethod
    def from_dict(vals: Dict[str, Any]) -> "InMemoryCoordSystemStore":
        """Build a store from a dictionary matching :class:`CoordSystemConfigModel`.

        Raises:
            ``ConfigurationError`` if the dictionary does not match the schema.
        """
        try:
            model = CoordSystemConfigModel.Schema().load(vals)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid coordinate system configuration: {e.messages}") from e
        return InMemoryCoordSystemStore.from_model(model)

    @staticmethod
    def from_json(source: Union[str, Path]) -> "InMemoryCoordSystemStore":
        """Build a store from a JSON file.

        Args:
            source: Path to a JSON document matching :class:`CoordSystemConfigModel`.
        """
        logger.info("Loading coordinate system configuration from %s", source)
        with open(source) as fh:
            try:
                vals = json.load(fh)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Coordinate system configuration {source} is not valid JSON") from e
        return InMemoryCoordSystemStore.from_dict(vals)

    def to_model(self) -> CoordSystemConfigModel:
        return CoordSystemConfigModel(
            coord_systems=list(self.coord_systems),
            feature_tables=list(self.feature_tables),
            assembly_mappings=list(self.assembly_mappings),
        )

    def to_dict(self) -> Dict[str, Any]:
        return CoordSystemConfigModel.Schema().dump(self.to_model())

    def fetch_coord_system_rows(self) -> Iterable[CoordSystemRow]:
        return list(self.coord_systems)

    def fetch_feature_table_rows(self) -> Iterable[FeatureTableRow]:
        return list(self.feature_tables)

    def fetch_mapping_declarations(self) -> List[str]:
        return list(self.assembly_mappings)

    def insert_coord_system(self, name: str, version: str, rank: int, attrib: Optional[str]) -> int:
        coord_system_id = max((row.coord_system_id for row in self.coord_systems), default=0) + 1
        self.coord_systems.append(
            CoordSystemRow(coord_system_id=coord_system_id, name=name, rank=rank, version=version, attrib=attrib)
        )
        return coord_system_id

    def insert_feature_table(self, coord_system_id: int, table_name: str):
        row = FeatureTableRow(table_name=table_name, coord_system_id=coord_system_id)
        if row not in self.feature_tables:
            self.feature_tables.append(row)
