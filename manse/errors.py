"""
Error taxonomy for the manse engine.

Two families:
- InputError: the user typed a birth date/time that does not exist.
  Recoverable, the form should re-prompt.
- CalculationIntegrityError: the calendar collaborators and our fixed tables
  disagree. Not recoverable by the user; indicates a library/table bug.

A month pillar near a solar-term boundary is NOT an error, see TrustLevel.
"""


class SajuCalculationError(Exception):
    """Base class. `code` is a stable machine-readable tag."""

    code = "CALCULATION_ERROR"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        if code is not None:
            self.code = code


# ============================================================
# INPUT ERRORS
# ============================================================

class InputError(SajuCalculationError, ValueError):
    code = "INVALID_INPUT"


class InvalidDateError(InputError):
    code = "INVALID_DATE"


class InvalidTimeError(InputError):
    code = "INVALID_TIME"


# ============================================================
# INTEGRITY ERRORS
# ============================================================

class CalculationIntegrityError(SajuCalculationError):
    code = "CALCULATION_ERROR"


class UnknownGanjiCharacterError(CalculationIntegrityError):
    code = "PARSE_ERROR"


class ElementTotalMismatchError(CalculationIntegrityError):

    def __init__(self, actual: int, expected: int):
        super().__init__(f"Element total {actual} does not match expected {expected}")
        self.actual = actual
        self.expected = expected


class GanjiMismatchError(CalculationIntegrityError):
    """Our computed pillar and the calendar library's pillar disagree."""

    def __init__(self, position: str, computed: str, upstream: str):
        super().__init__(
            f"{position} pillar mismatch: computed {computed}, calendar library says {upstream}"
        )
        self.position = position
        self.computed = computed
        self.upstream = upstream
