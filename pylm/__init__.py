"""
pylm: least-squares linear models with R-compatible inference.

Copyright (C) 2024 SGCX
Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Import main user-facing API
from .lm import fit, lm, LinearModel
from ._core import LmResp, DensePredChol
from .exceptions import (
    PyLMError,
    ValidationError,
    LengthMismatchError,
    InvalidArgumentError,
    UnsupportedOperationError,
    NumericalError,
    RankDeficiencyError,
)

# Import backend utilities (for advanced users)
from ._backends import get_backend, list_available_backends
from ._config import get_default_backend, set_default_backend

__all__ = [
    'fit',
    'lm',
    'LinearModel',
    'LmResp',
    'DensePredChol',
    'PyLMError',
    'ValidationError',
    'LengthMismatchError',
    'InvalidArgumentError',
    'UnsupportedOperationError',
    'NumericalError',
    'RankDeficiencyError',
    'get_backend',
    'list_available_backends',
    'get_default_backend',
    'set_default_backend',
]
