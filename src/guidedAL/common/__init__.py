"""
Common utilities shared across guidedAL: exceptions, logging, ID mapping and
input validation.
"""

from .exceptions import (
    ActiveLearningError,
    ValidationError,
    ConfigurationError,
    ComputationError,
    StrategyStateError,
    validate_parameter,
    require_positive,
)
from .id_mapper import IDMapper
from .logging_config import get_logger, setup_logging, LoggingTimer

__all__ = [
    "ActiveLearningError",
    "ValidationError",
    "ConfigurationError",
    "ComputationError",
    "StrategyStateError",
    "validate_parameter",
    "require_positive",
    "IDMapper",
    "get_logger",
    "setup_logging",
    "LoggingTimer",
]
