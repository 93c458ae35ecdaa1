__version__ = "0.1.0"

from inscripta.coordmap.coord_system import CoordSystem, CoordSystemAttribute, CoordSystemKind  # noqa: F401, E402
from inscripta.coordmap.registry import CoordSystemRegistry, NameResolution, Advisory  # noqa: F401, E402
from inscripta.coordmap.store import (  # noqa: F401, E402
    AbstractCoordSystemStore,
    InMemoryCoordSystemStore,
    CoordSystemConfigModel,
    CoordSystemRow,
    FeatureTableRow,
)
