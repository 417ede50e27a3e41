# src/smithy/domain/errors.py


class CalculationError(ValueError):
    """
    Raised when the engine is handed structurally invalid input
    (missing required nested objects, wrong types).

    Degenerate numbers (zero rates, payments below interest) never raise;
    they resolve to sentinel values instead.
    """
