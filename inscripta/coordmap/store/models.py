"""
Data models. These models describe the persisted rows a :class:`~inscripta.coordmap.registry.CoordSystemRegistry` is
built from, acting as a JSON schema for serializing and deserializing coordinate system configurations.
"""
from dataclasses import field
from typing import List, Optional, ClassVar, Type

from marshmallow import Schema
from marshmallow.validate import Range, Length
from marshmallow_dataclass import dataclass

from inscripta.coordmap.coord_system.coord_system import CoordSystem, CoordSystemAttribute


@dataclass
class BaseModel:
    """Base for all of the models."""

    Schema: ClassVar[Type[Schema]] = Schema  # noqa: F811

    class Meta:
        ordered = True


@dataclass
class CoordSystemRow(BaseModel):
    """One persisted coordinate system. ``attrib`` is a comma-separated attribute list such as
    ``default_version,sequence_level``."""

    coord_system_id: int = field(metadata=dict(validate=Range(min=1)))
    name: str = field(metadata=dict(validate=Length(min=1)))
    rank: int = field(metadata=dict(validate=Range(min=0)))
    version: Optional[str] = None
    attrib: Optional[str] = None

    def to_coord_system(self) -> CoordSystem:
        """Construct a :class:`CoordSystem` from this row. Attribute names that are not recognized are ignored here;
        use :meth:`CoordSystemAttribute.parse_csv()` to inspect them."""
        attributes, _ = CoordSystemAttribute.parse_csv(self.attrib)
        return CoordSystem(
            name=self.name,
            rank=self.rank,
            version=self.version,
            is_sequence_level=CoordSystemAttribute.SEQUENCE_LEVEL in attributes,
            is_default_version=CoordSystemAttribute.DEFAULT_VERSION in attributes,
            dbID=self.coord_system_id,
        )

    @staticmethod
    def from_coord_system(cs: CoordSystem) -> "CoordSystemRow":
        """Convert a stored :class:`CoordSystem` back to its row."""
        return CoordSystemRow(
            coord_system_id=cs.dbID,
            name=cs.name,
            rank=cs.rank,
            version=cs.version,
            attrib=CoordSystemAttribute.to_csv(cs.attributes),
        )


@dataclass
class FeatureTableRow(BaseModel):
    """Declares that features in ``table_name`` are stored in the coordinate system ``coord_system_id``."""

    table_name: str = field(metadata=dict(validate=Length(min=1)))
    coord_system_id: int


@dataclass
class CoordSystemConfigModel(BaseModel):
    """Everything a registry loads: coordinate systems, feature table associations, and the declared
    ``asm|cmp`` assembly mappings."""

    coord_systems: List[CoordSystemRow] = field(default_factory=list)
    feature_tables: List[FeatureTableRow] = field(default_factory=list)
    assembly_mappings: List[str] = field(default_factory=list)
