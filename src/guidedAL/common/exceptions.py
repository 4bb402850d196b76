"""
Exception hierarchy for guidedAL.

All library errors derive from ActiveLearningError. Running out of candidate
nodes is not an error: strategies return ``None`` or an empty list instead.

Each exception carries two dictionaries that are rendered into its message:
``details`` describe the offending input, ``context`` describes the operation
that was running.
"""

from typing import Any, Dict, List, Optional, Union
import traceback

# collections whose repr is longer than this are shown by type and length only
_MAX_INLINE_REPR = 100


def _summarize(key: str, value: Any) -> str:
    if isinstance(value, (list, dict, set, tuple)) and len(str(value)) > _MAX_INLINE_REPR:
        return f"{key}=<{type(value).__name__} with {len(value)} items>"
    return f"{key}={value}"


def _collect(base: Optional[Dict[str, Any]] = None, **fields: Any) -> Dict[str, Any]:
    """Merge the non-None fields into a copy of base."""
    merged = dict(base or {})
    merged.update({k: v for k, v in fields.items() if v is not None})
    return merged


class ActiveLearningError(Exception):
    """
    Base exception for guidedAL.

    Parameters
    ----------
    message : str
        What went wrong
    details : Dict[str, Any], optional
        Structured description of the offending input
    cause : Exception, optional
        Underlying exception, also set as ``__cause__``
    context : Dict[str, Any], optional
        The operation that was running

    Examples
    --------
    >>> raise ActiveLearningError("Cluster has no members", details={"cluster_id": 12})
    Traceback (most recent call last):
    ...
    guidedAL.common.exceptions.ActiveLearningError: Cluster has no members (Details: cluster_id=12)
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}
        super().__init__(self._render())
        if cause is not None:
            self.__cause__ = cause

    def _render(self) -> str:
        text = self.message
        if self.details:
            text += " (Details: " + ", ".join(_summarize(k, v) for k, v in self.details.items()) + ")"
        if self.context:
            text += " (Context: " + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")"
        return text

    def add_context(self, **kwargs: Any) -> 'ActiveLearningError':
        """Record more context; returns self so it can be chained into ``raise``."""
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            "exception_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc(),
        }


class ValidationError(ActiveLearningError):
    """
    Invalid input data.

    Raised for node ids outside the graph, label maps that use unknown
    classes and probability matrices of the wrong shape. ``field`` names the
    argument that failed; ``value`` and ``expected`` go into the details.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        prefix = f"Validation error in field '{field}'" if field else "Validation error"
        super().__init__(
            f"{prefix}: {message}",
            details=_collect(details, field=field, invalid_value=value, expected=expected),
            **kwargs
        )


class ConfigurationError(ActiveLearningError):
    """
    Invalid strategy configuration.

    Covers unknown scoring function names, non-positive ``nodes_per_cluster``
    and scoring functions whose collaborators are missing, such as risk based
    ranking without a classifier that reports expected risk.

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Unknown scoring function",
    ...     parameter="metric",
    ...     value="pagerank",
    ...     valid_options=["degree", "betweenness"]
    ... )  # doctest: +SKIP
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        if parameter and valid_options:
            message = f"{message}. Valid options for '{parameter}': {valid_options}"
        kwargs["details"] = _collect(
            kwargs.get("details"),
            parameter=parameter or None,
            invalid_value=value,
            valid_options=valid_options or None,
            function=function or None
        )
        super().__init__(message, **kwargs)


class ComputationError(ActiveLearningError):
    """A networkit metric or the hierarchical clusterer failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        kwargs["context"] = _collect(kwargs.get("context"), operation=operation, error_type=error_type)
        super().__init__(message, **kwargs)


class StrategyStateError(ActiveLearningError):
    """
    A strategy was used in a state that does not allow the operation.

    The usual case is ``pick``, ``peek`` or ``rank`` before ``initialize``.
    """

    def __init__(
        self,
        message: str,
        strategy: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.strategy = strategy
        self.operation = operation
        kwargs["context"] = _collect(kwargs.get("context"), strategy=strategy, operation=operation)
        super().__init__(message, **kwargs)


def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Raise ConfigurationError unless value is one of valid_options.

    Examples
    --------
    >>> validate_parameter("degree", ["degree", "closeness"], "metric")
    """
    if value not in valid_options:
        raise ConfigurationError(
            f"Invalid value for parameter '{parameter_name}': {value}",
            parameter=parameter_name,
            value=value,
            valid_options=valid_options,
            function=function_name
        )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """Raise ConfigurationError if value is not positive (or negative, with allow_zero)."""
    if value > 0 or (allow_zero and value == 0):
        return
    requirement = "non-negative" if allow_zero else "positive"
    raise ConfigurationError(
        f"Parameter '{parameter_name}' must be {requirement}, got {value}",
        parameter=parameter_name,
        value=value
    )
