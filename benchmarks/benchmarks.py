import itertools
from pathlib import Path

from inscripta.coordmap.coord_system import CoordSystem
from inscripta.coordmap.registry import CoordSystemRegistry
from inscripta.coordmap.store import InMemoryCoordSystemStore, CoordSystemRow

DATA_DIR = Path(__file__).parent.parent / "tests/data"

NCBI33 = DATA_DIR / "ncbi33.json"

LADDER_SIZE = 50


def build_ladder_store(size: int = LADDER_SIZE) -> InMemoryCoordSystemStore:
    """A chain of ``size`` coordinate systems where each level is assembled from the next, plus a second route from
    every even level to the level two below it."""
    rows = [
        CoordSystemRow(coord_system_id=i, name=f"level{i}", rank=i, version="", attrib="default_version")
        for i in range(1, size + 1)
    ]
    mappings = [f"level{i}|level{i + 1}" for i in range(1, size)]
    mappings.extend(f"level{i}|level{i + 2}" for i in range(2, size - 1, 2))
    return InMemoryCoordSystemStore(coord_systems=rows, assembly_mappings=mappings)


class TestRegistryConstruction:
    def setup(self):
        self.ncbi33_store = InMemoryCoordSystemStore.from_json(NCBI33)
        self.ladder_store = build_ladder_store()

    def time_load_ncbi33(self):
        _ = CoordSystemRegistry(self.ncbi33_store)

    def time_load_ladder(self):
        _ = CoordSystemRegistry(self.ladder_store)

    def time_from_json(self):
        _ = InMemoryCoordSystemStore.from_json(NCBI33)


class TestNameLookup:
    def setup(self):
        self.registry = CoordSystemRegistry(InMemoryCoordSystemStore.from_json(NCBI33))

    def time_fetch_by_name(self):
        _ = self.registry.fetch_by_name("chromosome", "NCBI34")

    def time_fetch_by_name_default_version(self):
        _ = self.registry.fetch_by_name("Chromosome")

    def time_fetch_sequence_level_alias(self):
        _ = self.registry.fetch_by_name("seqlevel")

    def time_fetch_all(self):
        _ = self.registry.fetch_all()


class TestMappingPathCold:
    """Every query starts from an empty mapping path cache."""

    def setup(self):
        self.ncbi33_store = InMemoryCoordSystemStore.from_json(NCBI33)
        self.ladder_store = build_ladder_store()

    def time_ncbi33_all_pairs(self):
        registry = CoordSystemRegistry(self.ncbi33_store)
        for cs1, cs2 in itertools.combinations(registry.fetch_all(), 2):
            _ = registry.get_mapping_path(cs1, cs2)

    def time_ladder_end_to_end(self):
        registry = CoordSystemRegistry(self.ladder_store)
        _ = registry.get_mapping_path(registry.fetch_by_dbID(1), registry.fetch_by_dbID(LADDER_SIZE))


class TestMappingPathCached:
    def setup(self):
        self.registry = CoordSystemRegistry(build_ladder_store())
        self.first = self.registry.fetch_by_dbID(1)
        self.last = self.registry.fetch_by_dbID(LADDER_SIZE)
        _ = self.registry.get_mapping_path(self.first, self.last)

    def time_ladder_end_to_end(self):
        _ = self.registry.get_mapping_path(self.first, self.last)

    def time_ladder_end_to_end_reversed(self):
        _ = self.registry.get_mapping_path(self.last, self.first)


class TestStore:
    def setup(self):
        self.registry = CoordSystemRegistry(build_ladder_store())

    def time_store(self):
        _ = self.registry.store(CoordSystem("scaffold", LADDER_SIZE + 1))
