"""
The graph of declared assembly mappings, keyed by coordinate system identifier.
"""
from typing import Dict, List, Iterable, Optional, Set, Tuple


class MappingGraph:
    """
    Immutable directed graph of declared assembly mappings between coordinate system identifiers.

    Edges run from an assembled coordinate system to each of its component coordinate systems. Components are kept
    in declaration order so that searches over the graph are deterministic, and every edge is also held in a set of
    directed pairs so that adjacency can be tested in either direction in constant time.
    """

    def __init__(self, edges: Iterable[Tuple[int, int]] = ()):
        """
        Args:
            edges: ``(assembled_id, component_id)`` pairs. Duplicates are collapsed.
        """
        self._components: Dict[int, List[int]] = {}
        self._pairs: Set[Tuple[int, int]] = set()
        for asm_id, cmp_id in edges:
            if (asm_id, cmp_id) in self._pairs:
                continue
            self._pairs.add((asm_id, cmp_id))
            self._components.setdefault(asm_id, []).append(cmp_id)

    def __len__(self):
        return len(self._pairs)

    def __contains__(self, pair: Tuple[int, int]) -> bool:
        return pair in self._pairs

    def __iter__(self):
        for asm_id, components in self._components.items():
            for cmp_id in components:
                yield asm_id, cmp_id

    def __repr__(self):
        return "<MappingGraph: {} edges>".format(len(self))

    def components_of(self, asm_id: int) -> Tuple[int, ...]:
        """Component identifiers of an assembled coordinate system, in declaration order."""
        return tuple(self._components.get(asm_id, ()))

    def direct_orientation(self, id1: int, id2: int) -> Optional[Tuple[int, int]]:
        """Returns the ``(assembled, component)`` orientation of a declared direct mapping between the two identifiers,
        or None if they are not directly related."""
        if (id1, id2) in self._pairs:
            return id1, id2
        if (id2, id1) in self._pairs:
            return id2, id1
        return None

    def is_directly_related(self, id1: int, id2: int) -> bool:
        return self.direct_orientation(id1, id2) is not None

    def find_cycle(self, start_ids: Iterable[int]) -> Optional[List[int]]:
        """Looks for a directed cycle among the identifiers reachable from ``start_ids``.

        This is an iterative depth-first search, so that a pathological configuration cannot exhaust the stack.

        Args:
            start_ids: Identifiers to start searching from.

        Returns:
            The identifiers forming the cycle, with the first identifier repeated at the end, or None.
        """
        # 1: on the current search path; 2: fully explored
        state: Dict[int, int] = {}
        for start in start_ids:
            if start in state:
                continue
            state[start] = 1
            path = [start]
            stack = [iter(self._components.get(start, ()))]
            while stack:
                child = next(stack[-1], None)
                if child is None:
                    state[path.pop()] = 2
                    stack.pop()
                elif state.get(child) == 1:
                    return path[path.index(child) :] + [child]
                elif child not in state:
                    state[child] = 1
                    path.append(child)
                    stack.append(iter(self._components.get(child, ())))
        return None
