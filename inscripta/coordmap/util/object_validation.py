from inscripta.coordmap.coord_system.coord_system import CoordSystem, RESERVED_NAMES
from inscripta.coordmap.exc import InvalidArgumentError


class ObjectValidation:
    @staticmethod
    def require_coord_system(obj):
        if type(obj) is not CoordSystem:
            raise InvalidArgumentError("CoordSystem argument expected, got {}".format(type(obj).__name__))

    @staticmethod
    def require_not_top_level(cs: CoordSystem):
        if cs.is_top_level:
            raise InvalidArgumentError("The top-level coordinate system is not allowed here:\n{}".format(repr(cs)))

    @staticmethod
    def require_name(name):
        if not name:
            raise InvalidArgumentError("Name argument is required")
        if not isinstance(name, str):
            raise InvalidArgumentError("Name argument must be a string, not {}".format(type(name).__name__))

    @staticmethod
    def require_storable_name(name: str):
        if not name or name.lower() in RESERVED_NAMES:
            raise InvalidArgumentError("[{}] is not a valid name for a CoordSystem".format(name))

    @staticmethod
    def require_non_negative_int(value, label: str):
        # bool is a subclass of int but is never a meaningful rank or identifier
        if type(value) is not int or value < 0:
            raise InvalidArgumentError("{} must be a non-negative integer, not [{}]".format(label, value))

    @staticmethod
    def require_version(version):
        if version is not None and not isinstance(version, str):
            raise InvalidArgumentError("Version argument must be a string, not {}".format(type(version).__name__))
