"""
Persistence collaborators. A registry is built from an :class:`AbstractCoordSystemStore`; the in-memory store is
used for configurations held in JSON and in tests.
"""

from inscripta.coordmap.store.base import AbstractCoordSystemStore  # noqa: F401
from inscripta.coordmap.store.memory import InMemoryCoordSystemStore  # noqa: F401
from inscripta.coordmap.store.models import (  # noqa: F401
    CoordSystemRow,
    FeatureTableRow,
    CoordSystemConfigModel,
)
