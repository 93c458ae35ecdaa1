"""
The :class:`CoordSystem` class identifies one coordinate system. Stored coordinate systems are owned by a
:class:`~inscripta.coordmap.registry.CoordSystemRegistry`; the synthetic top-level coordinate system is created once
per registry.
"""

from inscripta.coordmap.coord_system.coord_system import (  # noqa: F401
    CoordSystem,
    CoordSystemKind,
    CoordSystemAttribute,
    TOP_LEVEL_NAME,
    SEQ_LEVEL_NAME,
    RESERVED_NAMES,
)
