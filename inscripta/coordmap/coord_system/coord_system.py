from enum import Enum
from typing import Optional, Iterable, Set, Tuple, List

from inscripta.coordmap.exc import InvalidArgumentError

TOP_LEVEL_NAME = "toplevel"
SEQ_LEVEL_NAME = "seqlevel"
RESERVED_NAMES = frozenset([TOP_LEVEL_NAME, SEQ_LEVEL_NAME])


class CoordSystemKind(str, Enum):
    STORED = "stored"
    TOP_LEVEL = "top_level"


class CoordSystemAttribute(str, Enum):
    DEFAULT_VERSION = "default_version"
    SEQUENCE_LEVEL = "sequence_level"

    @staticmethod
    def parse_csv(attrib: Optional[str]) -> Tuple[Set["CoordSystemAttribute"], List[str]]:
        """Splits a persisted comma-separated attribute list.

        Args:
            attrib: Attribute string such as ``"default_version,sequence_level"``. May be null or empty.

        Returns:
            A tuple of the recognized attributes and a list of the attribute names that were not recognized.
        """
        known = set()
        unknown = []
        if not attrib:
            return known, unknown
        for value in attrib.split(","):
            value = value.strip()
            if not value:
                continue
            if value in CoordSystemAttribute._value2member_map_:
                known.add(CoordSystemAttribute(value))
            else:
                unknown.append(value)
        return known, unknown

    @staticmethod
    def to_csv(attributes: Iterable["CoordSystemAttribute"]) -> Optional[str]:
        """Renders attributes in their persisted form. Returns None if there are no attributes."""
        attributes = set(attributes)
        ordered = [attr.value for attr in CoordSystemAttribute if attr in attributes]
        return ",".join(ordered) if ordered else None


class CoordSystem:
    """
    A named, optionally versioned coordinate system such as ``chromosome:GRCh38`` or ``contig``.

    Coordinate systems come in two kinds. A *stored* coordinate system is backed by a persisted row and receives an
    integer identifier (``dbID``) once it is loaded or stored by a
    :class:`~inscripta.coordmap.registry.CoordSystemRegistry`. The *top-level* coordinate system is a synthetic
    marker meaning "the highest ranked coordinate system for a given region"; it has rank 0, no identifier, and is
    only ever built by :meth:`top_level()`.

    Apart from the one-time assignment of the identifier, instances are immutable.
    """

    __slots__ = (
        "_kind",
        "_name",
        "_version",
        "_rank",
        "_is_sequence_level",
        "_is_default_version",
        "_dbID",
    )

    def __init__(
        self,
        name: str,
        rank: int,
        version: Optional[str] = "",
        is_sequence_level: bool = False,
        is_default_version: bool = False,
        dbID: Optional[int] = None,
    ):
        """
        Args:
            name: Name of the coordinate system. Matching is case-insensitive.
            rank: Rank of the coordinate system. Stored coordinate systems must have a unique rank of at least 1,
                which is enforced when the coordinate system is stored.
            version: Version of the coordinate system. The empty string means the coordinate system is versionless.
            is_sequence_level: Is sequence stored at this coordinate system?
            is_default_version: Is this the default version of coordinate systems sharing this name?
            dbID: Identifier, if this coordinate system was loaded from persisted storage.
        """
        if not isinstance(name, str):
            raise InvalidArgumentError("Coordinate system name must be a string, not {}".format(type(name).__name__))
        if version is not None and not isinstance(version, str):
            raise InvalidArgumentError(
                "Coordinate system version must be a string, not {}".format(type(version).__name__)
            )
        self._kind = CoordSystemKind.STORED
        self._name = name
        self._version = version if version is not None else ""
        self._rank = rank
        self._is_sequence_level = bool(is_sequence_level)
        self._is_default_version = bool(is_default_version)
        self._dbID = dbID

    @classmethod
    def top_level(cls) -> "CoordSystem":
        """Builds the synthetic top-level coordinate system."""
        cs = cls(TOP_LEVEL_NAME, 0)
        cs._kind = CoordSystemKind.TOP_LEVEL
        return cs

    @property
    def kind(self) -> CoordSystemKind:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def dbID(self) -> Optional[int]:
        return self._dbID

    @property
    def is_sequence_level(self) -> bool:
        return self._is_sequence_level

    @property
    def is_default_version(self) -> bool:
        return self._is_default_version

    @property
    def is_top_level(self) -> bool:
        return self._kind is CoordSystemKind.TOP_LEVEL

    @property
    def is_stored(self) -> bool:
        return self._dbID is not None

    @property
    def attributes(self) -> Set[CoordSystemAttribute]:
        """The persisted attributes of this coordinate system."""
        attributes = set()
        if self._is_default_version:
            attributes.add(CoordSystemAttribute.DEFAULT_VERSION)
        if self._is_sequence_level:
            attributes.add(CoordSystemAttribute.SEQUENCE_LEVEL)
        return attributes

    def assign_dbID(self, dbID: int):
        """Sets the identifier of a newly stored coordinate system. An identifier can only be assigned once."""
        if self.is_top_level:
            raise InvalidArgumentError("The top-level coordinate system cannot have an identifier")
        if self._dbID is not None:
            raise InvalidArgumentError("{!r} already has identifier {}".format(self, self._dbID))
        self._dbID = dbID

    def _key(self) -> Tuple[CoordSystemKind, str, str]:
        return self._kind, self._name.lower(), self._version.lower()

    def __eq__(self, other):
        if type(other) is not CoordSystem:
            return False
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        if self._version:
            return "{}:{}".format(self._name, self._version)
        return self._name

    def __repr__(self):
        return "<CoordSystem: kind={}, name={}, version={}, rank={}, dbID={}>".format(
            self._kind.value, self._name, self._version, self._rank, self._dbID
        )
