"""
Error kinds raised by the chunk network.
"""


class PreconditionViolation(AssertionError):
    """Raised when a growth routine is called outside its precondition."""
    pass


class GrowthDepthExceeded(RuntimeError):
    """Raised when nested growth calls pass the configured ceiling."""

    def __init__(self, depth: int, ceiling: int):
        super().__init__(f"Growth depth {depth} exceeds ceiling {ceiling}")
        self.depth = depth
        self.ceiling = ceiling


class ParseError(ValueError):
    """Raised when a persisted network description is malformed."""
    pass
