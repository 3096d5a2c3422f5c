"""
errors.py — Error taxonomy for the arrangement engine.

Only InputError, DiscoveryEmptyError and a CanvasError raised during discovery
ever reach a caller. DecisionParseError is recovered by the fallback planner
and MutationError is collected per call by the batch executor.
"""


class ArrangerError(Exception):
    """Base class for arrangement errors."""


class InputError(ArrangerError):
    """A required parameter is missing or invalid."""


class DiscoveryEmptyError(ArrangerError):
    """Discovery succeeded but found nothing to arrange."""

    def __init__(self, message: str, hint: str = ""):
        super().__init__(message)
        self.hint = hint or (
            "Pass 'within' with the id of the frame that holds the elements, "
            "or list them explicitly with 'node_ids'."
        )


class DecisionParseError(ArrangerError):
    """The delegated decision response could not be used."""


class CanvasError(ArrangerError):
    """The canvas bridge could not be reached or answered with an error."""


class MutationError(CanvasError):
    """A single remote mutation call failed."""

    def __init__(self, tool: str, element_id: str, message: str):
        super().__init__(f"{tool} {element_id}: {message}")
        self.tool = tool
        self.element_id = element_id
        self.message = message
