"""
Parsing of declared assembly mappings. Each declaration has the form ``asmName[:asmVersion]|cmpName[:cmpVersion]``,
stating that the assembled coordinate system on the left is built from the component coordinate system on the right.
"""
from dataclasses import dataclass
from typing import Optional

from inscripta.coordmap.exc import MalformedMappingError

MAPPING_SEPARATOR = "|"
VERSION_SEPARATOR = ":"


@dataclass(frozen=True)
class MappingSide:
    """One side of a mapping declaration. ``version`` is None when the declaration did not name a version, and the
    empty string when it explicitly named the versionless coordinate system."""

    name: str
    version: Optional[str] = None

    def __str__(self):
        if self.version is None:
            return self.name
        return f"{self.name}{VERSION_SEPARATOR}{self.version}"


@dataclass(frozen=True)
class MappingDeclaration:
    assembled: MappingSide
    component: MappingSide

    def __str__(self):
        return f"{self.assembled}{MAPPING_SEPARATOR}{self.component}"


def parse_mapping_side(side: str, declaration: str) -> MappingSide:
    name, separator, version = side.partition(VERSION_SEPARATOR)
    name = name.strip()
    if not name:
        raise MalformedMappingError(f"Incorrectly formatted assembly mapping [{declaration}]: missing name")
    return MappingSide(name, version.strip() if separator else None)


def parse_mapping_declaration(declaration: str) -> MappingDeclaration:
    """Parse an ``asm|cmp`` declaration.

    Args:
        declaration: The raw declaration string.

    Returns:
        A :class:`MappingDeclaration`.

    Raises:
        ``MalformedMappingError`` if the declaration does not split into exactly two non-empty sides.
    """
    if not isinstance(declaration, str):
        raise MalformedMappingError(f"Assembly mapping must be a string, not {type(declaration).__name__}")
    sides = declaration.split(MAPPING_SEPARATOR)
    if len(sides) != 2 or not all(side.strip() for side in sides):
        raise MalformedMappingError(f"Incorrectly formatted assembly mapping [{declaration}]")
    asm, cmp = sides
    return MappingDeclaration(parse_mapping_side(asm, declaration), parse_mapping_side(cmp, declaration))
