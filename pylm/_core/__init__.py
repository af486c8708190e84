"""
Core algorithms (backend-agnostic).
"""

from .response import LmResp
from .predictor import DensePredChol
from .protocols import ModResp, LinPred

__all__ = [
    "LmResp",
    "DensePredChol",
    "ModResp",
    "LinPred",
]
