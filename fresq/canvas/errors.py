class CanvasError(Exception):
    code = "canvas_error"


class CanvasValidationError(CanvasError):
    code = "invalid_params"


class InvalidCoordinatesError(CanvasValidationError):
    code = "out_of_bounds"


class InvalidColorError(CanvasValidationError):
    code = "invalid_color"


class InvalidPaletteError(CanvasValidationError):
    code = "invalid_palette"


class InvalidCodeCountError(CanvasValidationError):
    code = "invalid_count"


class CanvasConflictError(CanvasError):
    pass


class InvalidCodeError(CanvasConflictError):
    code = "invalid_code"


class CellTakenError(CanvasConflictError):
    code = "cell_taken"


class AlreadyAssignedError(CanvasConflictError):
    code = "already_assigned"


class NotClaimedError(CanvasConflictError):
    code = "not_claimed"


class StaleStateError(CanvasConflictError):
    code = "stale_state"


class CellStateInvariantError(CanvasError):
    code = "cell_state_invariant"
