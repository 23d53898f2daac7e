"""Error taxonomy for plan operations.

GenerationFailure  -> gateway unreachable, non-success response, unparseable content
EmptyResult        -> gateway content too thin to use (treated as a GenerationFailure)
ValidationPrecondition -> out-of-range index or operation on a fasting meal
RegenerationInProgress -> single-flight guard rejected a second request for the same key
"""


class PlanError(Exception):
    """Base class for every error raised by the plan core."""


class GenerationFailure(PlanError):
    def __init__(self, message: str = "Generation failed", *, operation: str = ""):
        super().__init__(message)
        self.operation = operation


class EmptyResult(GenerationFailure):
    pass


class ValidationPrecondition(PlanError, ValueError):
    pass


class RegenerationInProgress(PlanError):
    def __init__(self, key):
        super().__init__(f"A request for '{key}' is already in progress")
        self.key = key


__all__ = [
    'PlanError', 'GenerationFailure', 'EmptyResult',
    'ValidationPrecondition', 'RegenerationInProgress',
]
