class CoordMapException(Exception):
    """
    Base exception class for CoordMap.
    """

    pass


class InvalidArgumentError(CoordMapException):
    """
    Raised when a caller provides malformed input, such as a negative rank, a missing name, or a coordinate system
    that does not belong to the registry being queried.
    """

    pass


class ConfigurationError(CoordMapException):
    """
    Raised when the loaded coordinate system data violates a structural invariant -- for example zero or multiple
    sequence-level coordinate systems, or a feature table without a declared coordinate system.
    """

    pass


class MalformedMappingError(ConfigurationError):
    """
    Raised when a declared assembly mapping cannot be parsed into an assembled and a component side.
    """

    pass


class InvalidReferenceError(ConfigurationError):
    """
    Raised when loaded data refers to a coordinate system that does not exist.
    """

    pass


class CircularMappingError(ConfigurationError):
    """
    Raised when the declared assembly mappings reachable from a pair of coordinate systems contain a cycle.
    """

    pass


class DuplicateConflictError(CoordMapException):
    """
    Raised when storing a coordinate system would violate a uniqueness rule: a second sequence-level system, a
    second default version for a name, or a rank that is already in use.
    """

    pass


class NoDefaultVersionWarning(UserWarning):
    pass


class DidYouMeanAliasWarning(UserWarning):
    pass


class AlreadyStoredWarning(UserWarning):
    pass
