"""
Labeling data types: classifications, probability estimates and data splits.
"""

from .classification import Classification, UNKNOWN
from .estimate import Estimate
from .split import DataSplit

__all__ = ["Classification", "UNKNOWN", "Estimate", "DataSplit"]
