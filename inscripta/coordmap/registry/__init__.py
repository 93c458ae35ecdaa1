from inscripta.coordmap.registry.registry import CoordSystemRegistry, NameResolution, Advisory  # noqa: F401
