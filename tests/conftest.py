import pytest
from pathlib import Path
from typing import List, Optional, Tuple

from inscripta.coordmap.registry import CoordSystemRegistry
from inscripta.coordmap.store import InMemoryCoordSystemStore, CoordSystemRow


@pytest.fixture
def test_data_dir() -> Path:
    return Path(__file__).parent / "data"


@pytest.fixture
def ncbi33_store(test_data_dir) -> InMemoryCoordSystemStore:
    return InMemoryCoordSystemStore.from_json(test_data_dir / "ncbi33.json")


@pytest.fixture
def ncbi33_registry(ncbi33_store) -> CoordSystemRegistry:
    return CoordSystemRegistry(ncbi33_store)


def build_store(
    coord_systems: List[Tuple[str, Optional[str], Optional[str]]],
    mappings: Optional[List[str]] = None,
) -> InMemoryCoordSystemStore:
    """Build a store from ``(name, version, attrib)`` tuples. Identifiers and ranks follow list order, starting at 1."""
    rows = [
        CoordSystemRow(coord_system_id=i, name=name, rank=i, version=version, attrib=attrib)
        for i, (name, version, attrib) in enumerate(coord_systems, 1)
    ]
    return InMemoryCoordSystemStore(coord_systems=rows, assembly_mappings=mappings)


@pytest.fixture
def make_registry():
    def _make_registry(coord_systems, mappings=None) -> CoordSystemRegistry:
        return CoordSystemRegistry(build_store(coord_systems, mappings))

    return _make_registry
