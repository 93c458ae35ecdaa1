"""
Mapping path resolution. Given two coordinate systems, find the chain of declared assembly mappings that connects
them, so that positions can be projected from one coordinate system to the other.

For example, if the following mappings are declared::

    chromosome|clone
    clone|contig

then the mapping path between ``chromosome`` and ``contig`` is ``[chromosome, clone, contig]``, in either argument
order. Paths are ordered from assembled to component coordinate systems, except when two coordinate systems are only
related through a shared component. With the declarations::

    chromosome|contig
    clone|contig

the path between ``chromosome`` and ``clone`` is ``assembled -> component -> assembled``, for example
``[clone, contig, chromosome]``.
"""
import logging
import threading
from typing import Callable, Dict, List, Optional, Set, Tuple

from inscripta.coordmap.coord_system.coord_system import CoordSystem
from inscripta.coordmap.exc import CircularMappingError
from inscripta.coordmap.mapping.graph import MappingGraph

logger = logging.getLogger(__name__)

PairKey = Tuple[int, int]
Path = Tuple[CoordSystem, ...]


def pair_key(id1: int, id2: int) -> PairKey:
    """Unordered pair of identifiers, smaller identifier first."""
    return (id1, id2) if id1 <= id2 else (id2, id1)


class MappingPathCache:
    """
    Memo table of resolved mapping paths, keyed by unordered identifier pair. Entries are only ever added; a pair
    that has been resolved keeps its path for the lifetime of the cache.
    """

    def __init__(self):
        self._paths: Dict[PairKey, Path] = {}

    def __len__(self):
        return len(self._paths)

    def __contains__(self, key: PairKey) -> bool:
        return key in self._paths

    def get(self, key: PairKey) -> Optional[Path]:
        return self._paths.get(key)

    def update(self, paths: Dict[PairKey, Path]):
        for key, path in paths.items():
            # first writer wins
            self._paths.setdefault(key, path)


class MappingPathResolver:
    """
    Finds the shortest chain of declared assembly mappings between two stored coordinate systems.

    The resolver holds no state besides its memo table: the graph of declared mappings and the identifier lookup are
    provided by the owning :class:`~inscripta.coordmap.registry.CoordSystemRegistry`.
    """

    def __init__(
        self,
        graph: MappingGraph,
        fetch_by_dbID: Callable[[int], Optional[CoordSystem]],
        lock: Optional[threading.RLock] = None,
    ):
        """
        Args:
            graph: Declared assembly mappings.
            fetch_by_dbID: Identifier lookup for stored coordinate systems.
            lock: Lock serializing cache updates. A new lock is created if not provided.
        """
        self.graph = graph
        self.cache = MappingPathCache()
        self._fetch_by_dbID = fetch_by_dbID
        self._lock = lock if lock is not None else threading.RLock()

    def get_mapping_path(self, cs1: CoordSystem, cs2: CoordSystem) -> List[CoordSystem]:
        """Given two stored coordinate systems, return the mapping path between them.

        The path is a list of coordinate systems starting with an assembled coordinate system and descending through
        component coordinate systems. Two coordinate systems that share a component produce a path shaped
        ``assembled -> component -> assembled``, in which case either coordinate system may come first.

        The search is always run with the coarser coordinate system (lower rank) tried first as the assembled side,
        so the result for a pair does not depend on the argument order. Among equally short candidates, the first
        one found wins.

        Args:
            cs1: A stored coordinate system.
            cs2: Another stored coordinate system.

        Returns:
            The mapping path, or an empty list if the two coordinate systems are not connected. The same path is
            returned for ``(cs1, cs2)`` and ``(cs2, cs1)``.

        Raises:
            ``CircularMappingError`` if the declared mappings reachable from either coordinate system contain a cycle.
        """
        key = pair_key(cs1.dbID, cs2.dbID)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        with self._lock:
            cached = self.cache.get(key)
            if cached is not None:
                return list(cached)

            if cs1.dbID == cs2.dbID:
                self.cache.update({key: ()})
                return []

            cycle = self.graph.find_cycle((cs1.dbID, cs2.dbID))
            if cycle is not None:
                names = " -> ".join(str(self._fetch_by_dbID(dbID)) for dbID in cycle)
                logger.debug("Cycle [%s] reachable from %s and %s", names, cs1, cs2)
                raise CircularMappingError(f"Circular logic detected in defined assembly mappings: {names}")

            logger.debug("Resolving mapping path between %s and %s", cs1, cs2)
            pending: Dict[PairKey, Path] = {}
            path = self._resolve(cs1, cs2, set(), pending)
            self.cache.update(pending)
        return list(path)

    def _lookup(self, key: PairKey, pending: Dict[PairKey, Path]) -> Optional[Path]:
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        return pending.get(key)

    def _resolve(
        self,
        cs1: CoordSystem,
        cs2: CoordSystem,
        seen: Set[PairKey],
        pending: Dict[PairKey, Path],
    ) -> Path:
        """Recursive search. Results are staged in ``pending`` and only reach the cache once the outermost query has
        finished. ``seen`` holds the pairs visited by the current query."""
        # the coarser system is always tried first as the assembled side
        cs1, cs2 = sorted((cs1, cs2), key=lambda cs: (cs.rank, cs.dbID))
        key = pair_key(cs1.dbID, cs2.dbID)
        known = self._lookup(key, pending)
        if known is not None:
            return known

        orientation = self.graph.direct_orientation(cs1.dbID, cs2.dbID)
        if orientation is not None:
            path = (cs1, cs2) if orientation[0] == cs1.dbID else (cs2, cs1)
            pending[key] = path
            return path

        if key in seen:
            raise CircularMappingError("Circular logic detected in defined assembly mappings")
        seen.add(key)

        best: Path = ()
        for asm_cs, target_cs in ((cs1, cs2), (cs2, cs1)):
            shortest: Optional[Path] = None
            for cmp_id in self.graph.components_of(asm_cs.dbID):
                cmp_cs = self._fetch_by_dbID(cmp_id)
                sub_path = self._resolve(cmp_cs, target_cs, seen, pending)
                if not sub_path:
                    continue
                if sub_path[0].dbID == cmp_id:
                    path = (asm_cs,) + sub_path
                else:
                    path = sub_path + (asm_cs,)
                if len(sub_path) == 2:
                    pending[key] = path
                    return path
                if shortest is None or len(path) < len(shortest):
                    shortest = path
            if shortest is not None and (not best or len(shortest) < len(best)):
                best = shortest

        pending[key] = best
        return best
