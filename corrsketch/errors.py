class InvalidInputError(ValueError):
    """Raised when a caller passes arguments that can never be processed,
    e.g. keys and values of different lengths or a malformed serialized
    sketch. Retrying with the same input fails again.
    """


class UnsupportedCombinationError(InvalidInputError):
    """Raised when an estimator is asked to handle a pair of column types
    that it does not implement."""


class SketchStateError(RuntimeError):
    """Raised when a sketch reaches a state that its invariants forbid."""


class EmptySynopsisError(SketchStateError):
    """Raised when a set estimate is requested on a sketch with no entries."""
