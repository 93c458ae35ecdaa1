"""
Declared assembly mappings between coordinate systems, and the resolution of mapping paths over them.
"""

from inscripta.coordmap.mapping.declaration import (  # noqa: F401
    MappingDeclaration,
    MappingSide,
    parse_mapping_declaration,
)
from inscripta.coordmap.mapping.graph import MappingGraph  # noqa: F401
from inscripta.coordmap.mapping.resolver import MappingPathResolver, MappingPathCache, pair_key  # noqa: F401
