"""
The coordinate system registry. A :class:`CoordSystemRegistry` is built once per backing store: it eagerly loads every
coordinate system, every feature table association and every declared assembly mapping, and indexes them so that all
queries are lookups against in-memory state.

Coordinate system names are matched case-insensitively. Two names are reserved aliases:

* ``toplevel`` resolves to the synthetic top-level coordinate system (also returned for rank 0).
* ``seqlevel`` resolves to the coordinate system at which sequence is stored.

Many coordinate systems do not have a version for the whole coordinate system (the ``clone`` coordinate system has
per-sequence versions but no assembly version, unlike ``chromosome``). Those use the empty string as their version.
"""
import logging
import threading
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union, Type

from methodtools import lru_cache

from inscripta.coordmap.coord_system.coord_system import (
    CoordSystem,
    CoordSystemAttribute,
    TOP_LEVEL_NAME,
    SEQ_LEVEL_NAME,
)
from inscripta.coordmap.exc import (
    InvalidArgumentError,
    ConfigurationError,
    InvalidReferenceError,
    DuplicateConflictError,
    NoDefaultVersionWarning,
    DidYouMeanAliasWarning,
    AlreadyStoredWarning,
)
from inscripta.coordmap.mapping.declaration import parse_mapping_declaration, MappingSide
from inscripta.coordmap.mapping.graph import MappingGraph
from inscripta.coordmap.mapping.resolver import MappingPathResolver, MappingPathCache
from inscripta.coordmap.store.base import AbstractCoordSystemStore
from inscripta.coordmap.util.object_validation import ObjectValidation

logger = logging.getLogger(__name__)


class Advisory(str, Enum):
    """Recoverable conditions encountered while resolving a coordinate system by name."""

    NO_DEFAULT_VERSION = "no_default_version"
    DID_YOU_MEAN_TOPLEVEL = "did_you_mean_toplevel"
    DID_YOU_MEAN_SEQLEVEL = "did_you_mean_seqlevel"

    @property
    def warning_class(self) -> Type[UserWarning]:
        if self is Advisory.NO_DEFAULT_VERSION:
            return NoDefaultVersionWarning
        return DidYouMeanAliasWarning


@dataclass(frozen=True)
class NameResolution:
    """Result of :meth:`CoordSystemRegistry.resolve_by_name()`: the coordinate system found (if any), and an optional
    advisory that callers can log, raise as a warning, or ignore."""

    coord_system: Optional[CoordSystem]
    advisory: Optional[Advisory] = None
    message: Optional[str] = None

    def warn(self):
        """Issue the advisory, if there is one, as a warning."""
        if self.advisory is not None:
            warnings.warn(self.advisory.warning_class(self.message))


class CoordSystemRegistry:
    """
    In-memory index of the coordinate systems held in an :class:`AbstractCoordSystemStore`, together with the
    declared assembly mappings between them.

    :meth:`store()` and :meth:`add_feature_table()` are the only mutators. They, and the caching of resolved mapping
    paths, are serialized on a lock owned by the registry; everything else is a read.
    """

    def __init__(self, store: AbstractCoordSystemStore):
        """
        Args:
            store: The persistence collaborator to load from and write through.

        Raises:
            ``InvalidReferenceError`` if a feature table association or an assembly mapping refers to an unknown
            coordinate system.
            ``MalformedMappingError`` if an assembly mapping cannot be parsed.
            ``ConfigurationError`` if an assembly mapping uses the ``seqlevel`` alias and the sequence level is
            not uniquely defined.
        """
        self.backing_store = store
        self._lock = threading.RLock()
        self._dbID_cache: Dict[int, CoordSystem] = {}
        self._name_cache: Dict[str, List[CoordSystem]] = {}
        self._rank_cache: Dict[int, CoordSystem] = {}
        self._attribute_cache: Dict[CoordSystemAttribute, Dict[int, CoordSystem]] = {
            attribute: {} for attribute in CoordSystemAttribute
        }
        self._feature_cache: Dict[str, List[CoordSystem]] = {}
        self._top_level = CoordSystem.top_level()

        self._load_coord_systems()
        self._load_feature_tables()
        self._resolver = MappingPathResolver(self._load_mappings(), self.fetch_by_dbID, self._lock)
        logger.info(
            "Loaded %d coordinate systems, %d feature tables and %d assembly mappings",
            len(self._dbID_cache),
            len(self._feature_cache),
            len(self._resolver.graph),
        )

    def __len__(self):
        return len(self._dbID_cache)

    def __repr__(self):
        return "<CoordSystemRegistry: {}>".format(", ".join(str(cs) for cs in self.fetch_all()))

    @property
    def mapping_graph(self) -> MappingGraph:
        return self._resolver.graph

    @property
    def mapping_path_cache(self) -> MappingPathCache:
        return self._resolver.cache

    def _load_coord_systems(self):
        for row in self.backing_store.fetch_coord_system_rows():
            _, unknown = CoordSystemAttribute.parse_csv(row.attrib)
            if unknown:
                logger.warning("Ignoring unknown attributes %s of coord_system id=[%s]", unknown, row.coord_system_id)
            self._index(row.to_coord_system())

    def _load_feature_tables(self):
        for row in self.backing_store.fetch_feature_table_rows():
            cs = self._dbID_cache.get(row.coord_system_id)
            if cs is None:
                raise InvalidReferenceError(
                    f"Feature table [{row.table_name}] refers to non-existent coord_system id=[{row.coord_system_id}]"
                )
            coord_systems = self._feature_cache.setdefault(row.table_name.lower(), [])
            if cs not in coord_systems:
                coord_systems.append(cs)

    def _load_mappings(self) -> MappingGraph:
        edges = []
        for value in self.backing_store.fetch_mapping_declarations():
            declaration = parse_mapping_declaration(value)
            asm_cs = self._resolve_mapping_side(declaration.assembled, value)
            cmp_cs = self._resolve_mapping_side(declaration.component, value)
            edges.append((asm_cs.dbID, cmp_cs.dbID))
        return MappingGraph(edges)

    def _resolve_mapping_side(self, side: MappingSide, declaration: str) -> CoordSystem:
        resolution = self.resolve_by_name(side.name, side.version)
        if resolution.advisory is not None:
            logger.warning("Assembly mapping [%s]: %s", declaration, resolution.message)
        cs = resolution.coord_system
        if cs is None or not cs.is_stored:
            raise InvalidReferenceError(f"Assembly mapping [{declaration}] refers to unknown coord_system [{side}]")
        return cs

    def _index(self, cs: CoordSystem):
        self._dbID_cache[cs.dbID] = cs
        self._name_cache.setdefault(cs.name.lower(), []).append(cs)
        # ranks are unique among stored coordinate systems; a duplicate from a corrupt store replaces the earlier one
        self._rank_cache[cs.rank] = cs
        for attribute in cs.attributes:
            self._attribute_cache[attribute][cs.dbID] = cs

    def _require_stored_here(self, cs: CoordSystem):
        ObjectValidation.require_coord_system(cs)
        ObjectValidation.require_not_top_level(cs)
        if cs.dbID is None or self._dbID_cache.get(cs.dbID) != cs:
            raise InvalidArgumentError(f"CoordSystem {cs} is not stored in this registry")

    @lru_cache(maxsize=1)
    def _ranked(self) -> Tuple[CoordSystem, ...]:
        return tuple(self._rank_cache[rank] for rank in sorted(self._rank_cache))

    def fetch_all(self) -> List[CoordSystem]:
        """Retrieves every stored coordinate system in ascending order of rank, so the coordinate system with rank 1
        comes first. The top-level coordinate system is not included."""
        return list(self._ranked())

    def fetch_by_rank(self, rank: int) -> Optional[CoordSystem]:
        """Retrieves a coordinate system by rank. Rank 0 is reserved for the top-level coordinate system.

        Returns:
            The coordinate system, or None if no coordinate system has this rank.

        Raises:
            ``InvalidArgumentError`` if the rank is not a non-negative integer.
        """
        ObjectValidation.require_non_negative_int(rank, "Rank argument")
        if rank == 0:
            return self.fetch_top_level()
        return self._rank_cache.get(rank)

    def resolve_by_name(self, name: str, version: Optional[str] = None) -> NameResolution:
        """Look up a coordinate system by name without emitting warnings.

        Args:
            name: Name of the coordinate system, or one of the aliases ``toplevel`` and ``seqlevel``.
            version: Version to retrieve. If None, the default version is used. The empty string selects the
                versionless coordinate system of this name.

        Returns:
            A :class:`NameResolution`. If no version was requested and no coordinate system of this name is flagged
            as the default version, the first one loaded is chosen and ``Advisory.NO_DEFAULT_VERSION`` is attached.
        """
        ObjectValidation.require_name(name)
        ObjectValidation.require_version(version)
        name_lc = name.lower()

        if name_lc == SEQ_LEVEL_NAME:
            return NameResolution(self.fetch_sequence_level())
        if name_lc == TOP_LEVEL_NAME:
            return NameResolution(self.fetch_top_level())

        coord_systems = self._name_cache.get(name_lc)
        if not coord_systems:
            if "top" in name_lc:
                return NameResolution(
                    None,
                    Advisory.DID_YOU_MEAN_TOPLEVEL,
                    f"Did you mean '{TOP_LEVEL_NAME}' coord system instead of '{name}'?",
                )
            if "seq" in name_lc:
                return NameResolution(
                    None,
                    Advisory.DID_YOU_MEAN_SEQLEVEL,
                    f"Did you mean '{SEQ_LEVEL_NAME}' coord system instead of '{name}'?",
                )
            return NameResolution(None)

        if version is not None:
            version_lc = version.lower()
            for cs in coord_systems:
                if cs.version.lower() == version_lc:
                    return NameResolution(cs)
            return NameResolution(None)

        for cs in coord_systems:
            if cs.is_default_version:
                return NameResolution(cs)

        cs = coord_systems[0]
        return NameResolution(
            cs,
            Advisory.NO_DEFAULT_VERSION,
            f"No default version for coord_system [{name}] exists. Using version [{cs.version}] arbitrarily",
        )

    def fetch_by_name(self, name: str, version: Optional[str] = None) -> Optional[CoordSystem]:
        """Retrieves a coordinate system by name. See :meth:`resolve_by_name()`; advisories are issued as warnings
        (:class:`NoDefaultVersionWarning` or :class:`DidYouMeanAliasWarning`).

        Returns:
            The coordinate system, or None if it does not exist.
        """
        resolution = self.resolve_by_name(name, version)
        resolution.warn()
        return resolution.coord_system

    def fetch_all_by_name(self, name: str) -> List[CoordSystem]:
        """Retrieves every coordinate system with this name, in load order. The aliases ``toplevel`` and ``seqlevel``
        return a single coordinate system."""
        ObjectValidation.require_name(name)
        name_lc = name.lower()
        if name_lc == SEQ_LEVEL_NAME:
            return [self.fetch_sequence_level()]
        if name_lc == TOP_LEVEL_NAME:
            return [self.fetch_top_level()]
        return list(self._name_cache.get(name_lc, []))

    def fetch_all_by_attribute(self, attribute: Union[CoordSystemAttribute, str]) -> List[CoordSystem]:
        """Retrieves every coordinate system flagged with an attribute, ordered by identifier."""
        if not isinstance(attribute, CoordSystemAttribute):
            if attribute not in CoordSystemAttribute._value2member_map_:
                raise InvalidArgumentError(f"[{attribute}] is not a coord_system attribute")
            attribute = CoordSystemAttribute(attribute)
        flagged = self._attribute_cache[attribute]
        return [flagged[dbID] for dbID in sorted(flagged)]

    def fetch_by_dbID(self, dbID: int) -> Optional[CoordSystem]:
        """Retrieves a coordinate system by identifier, or None if no coordinate system has this identifier."""
        if dbID is None:
            raise InvalidArgumentError("dbID argument is required")
        return self._dbID_cache.get(dbID)

    def fetch_top_level(self) -> CoordSystem:
        """Retrieves the top-level pseudo coordinate system."""
        return self._top_level

    def fetch_sequence_level(self) -> CoordSystem:
        """Retrieves the coordinate system at which sequence is stored.

        Raises:
            ``ConfigurationError`` if there is no sequence-level coordinate system, or more than one.
        """
        sequence_level = self._attribute_cache[CoordSystemAttribute.SEQUENCE_LEVEL]
        if not sequence_level:
            raise ConfigurationError("No sequence_level coord_system is defined")
        if len(sequence_level) > 1:
            raise ConfigurationError("Multiple sequence_level coord_systems are defined. Only one is supported")
        return next(iter(sequence_level.values()))

    def fetch_all_by_feature_table(self, table: str) -> List[CoordSystem]:
        """Retrieves the coordinate systems that features in a table are stored in.

        Raises:
            ``ConfigurationError`` if the table has no declared coordinate system.
        """
        if not table:
            raise InvalidArgumentError("Table argument is required")
        coord_systems = self._feature_cache.get(table.lower())
        if not coord_systems:
            raise ConfigurationError(f"Feature table [{table}] does not have a defined coordinate system")
        return list(coord_systems)

    def add_feature_table(self, cs: CoordSystem, table: str):
        """Declares that features from ``table`` are stored in ``cs``. If the association is not already known it is
        persisted through the store.

        Raises:
            ``InvalidArgumentError`` if ``cs`` is not stored in this registry or no table is given.
        """
        ObjectValidation.require_coord_system(cs)
        if not table:
            raise InvalidArgumentError("Table argument is required")
        table_lc = table.lower()
        with self._lock:
            self._require_stored_here(cs)
            if cs in self._feature_cache.get(table_lc, []):
                return
            self.backing_store.insert_feature_table(cs.dbID, table_lc)
            self._feature_cache.setdefault(table_lc, []).append(self._dbID_cache[cs.dbID])
            logger.debug("Added feature table [%s] to coord_system %s", table_lc, cs)

    def store(self, cs: CoordSystem) -> Optional[CoordSystem]:
        """Stores a new coordinate system, assigning its identifier and adding it to every index.

        Storing a coordinate system that already has an identifier, or whose name and version are already stored,
        issues an :class:`AlreadyStoredWarning` and returns the stored coordinate system without changing anything.

        Returns:
            The stored coordinate system.

        Raises:
            ``InvalidArgumentError`` for the top-level coordinate system, an empty or reserved name, or a rank that is
            not a positive integer.
            ``DuplicateConflictError`` for a second sequence-level coordinate system, a second default version of a
            name, or a rank that is already used.
        """
        ObjectValidation.require_coord_system(cs)
        if cs.is_top_level:
            raise InvalidArgumentError("The toplevel CoordSystem cannot be stored")

        with self._lock:
            if cs.is_stored:
                warnings.warn(AlreadyStoredWarning(f"CoordSystem {cs} is already stored"))
                return self._dbID_cache.get(cs.dbID, cs)

            ObjectValidation.require_storable_name(cs.name)

            if cs.is_sequence_level and self._attribute_cache[CoordSystemAttribute.SEQUENCE_LEVEL]:
                raise DuplicateConflictError("There can only be one sequence level CoordSystem")

            for existing in self._name_cache.get(cs.name.lower(), []):
                if existing.version.lower() == cs.version.lower():
                    warnings.warn(AlreadyStoredWarning(f"CoordSystem {cs} is already stored"))
                    return existing
                if cs.is_default_version and existing.is_default_version:
                    raise DuplicateConflictError(f"There can only be one default version of CoordSystem {cs.name}")

            ObjectValidation.require_non_negative_int(cs.rank, "Rank attribute")
            if cs.rank == 0:
                raise InvalidArgumentError("Only the toplevel CoordSystem may have rank 0")
            if cs.rank in self._rank_cache:
                raise DuplicateConflictError(f"CoordSystem with rank [{cs.rank}] already exists")

            dbID = self.backing_store.insert_coord_system(
                cs.name, cs.version, cs.rank, CoordSystemAttribute.to_csv(cs.attributes)
            )
            cs.assign_dbID(dbID)
            self._index(cs)
            self._ranked.cache_clear()
            logger.info("Stored CoordSystem %s with rank %d as id=[%d]", cs, cs.rank, dbID)
            return cs

    def get_mapping_path(self, cs1: CoordSystem, cs2: CoordSystem) -> List[CoordSystem]:
        """Given two stored coordinate systems, returns the mapping path between them. See
        :meth:`MappingPathResolver.get_mapping_path()`.

        Raises:
            ``InvalidArgumentError`` if either coordinate system is not stored in this registry.
            ``CircularMappingError`` if the declared mappings reachable from either coordinate system contain a cycle.
        """
        self._require_stored_here(cs1)
        self._require_stored_here(cs2)
        return self._resolver.get_mapping_path(cs1, cs2)
