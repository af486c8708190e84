"""
Exception hierarchy for pylm.

All exceptions inherit from PyLMError so callers can catch any
library-specific error in one place. Errors are raised at the call
boundary and carry the offending values in their messages.
"""


class PyLMError(Exception):
    """Base exception for all pylm errors."""
    pass


class ValidationError(PyLMError, ValueError):
    """Input validation failed."""
    pass


class LengthMismatchError(ValidationError):
    """
    Vector lengths are inconsistent.

    Raised when mu, offset, weights or a linear predictor output do not
    match the length of the response.

    Attributes:
        name: Name of the offending vector
        actual: Length that was supplied
        expected: Acceptable length(s)
    """

    def __init__(
        self,
        message: str,
        name: str | None = None,
        actual: int | None = None,
        expected: tuple[int, ...] | None = None
    ):
        super().__init__(message)
        self.name = name
        self.actual = actual
        self.expected = expected


class InvalidArgumentError(PyLMError, ValueError):
    """An argument has a value outside its accepted set."""
    pass


class UnsupportedOperationError(PyLMError):
    """
    Operation is not implemented for this model configuration.

    Currently raised for confidence/prediction intervals on weighted fits.
    """
    pass


class NumericalError(PyLMError):
    """Numerical computation failed."""
    pass


class RankDeficiencyError(NumericalError):
    """
    Design matrix is column-rank-deficient.

    Raised when the normal equations are singular and the predictor
    was built without pivoting (allow_rank_deficient=False).

    Attributes:
        rank: Numerical rank detected
        expected_rank: Number of columns in the design
    """

    def __init__(
        self,
        message: str,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.rank = rank
        self.expected_rank = expected_rank
