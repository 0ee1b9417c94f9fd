"""
Custom exceptions for pylongleaf.
Provides domain-specific error handling with informative messages.
"""


class LongleafError(Exception):
    """Base exception for all pylongleaf errors."""
    pass


class ConfigurationError(LongleafError):
    """Raised when there are configuration-related issues."""
    pass


class DataError(LongleafError):
    """Raised when there are data-related issues."""
    pass


class InvalidDataError(DataError):
    """Raised when data is malformed or invalid."""
    def __init__(self, data_description: str, reason: str):
        self.data_description = data_description
        self.reason = reason
        super().__init__(f"Invalid {data_description}: {reason}")


class ValidationError(LongleafError, ValueError):
    """Raised when input vectors are malformed or mismatched."""
    pass


class MalformedInputError(ValidationError):
    """Raised when tree vectors have missing DBH values or unequal lengths."""
    pass


class InsufficientInputError(LongleafError, ValueError):
    """Raised when fewer independent variables are given than a system needs."""
    def __init__(self, operation: str, missing=(), required: str = ""):
        self.operation = operation
        self.missing = tuple(missing)
        message = f"Not enough information for '{operation}'"
        if self.missing:
            message += f": missing {', '.join(self.missing)}"
        if required:
            message += f" ({required})"
        super().__init__(message)


class InsufficientDataError(LongleafError):
    """Raised when too few measurements are available to fit a model."""
    pass


class IncompleteDataError(InsufficientDataError):
    """Raised when a vector that must be complete has missing values."""
    def __init__(self, data_description: str, n_missing: int):
        self.data_description = data_description
        self.n_missing = n_missing
        super().__init__(f"{data_description} has {n_missing} missing value(s); "
                         f"a complete vector is required")


class DegenerateInputError(LongleafError, ValueError):
    """Raised when an input would produce a zero or invalid denominator."""
    pass


class DomainError(LongleafError, ValueError):
    """Raised when a value is outside the domain of a log or power term."""
    def __init__(self, param_name: str, value, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        message = f"Invalid value for '{param_name}': {value}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class LongleafWarning(UserWarning):
    """Base category for non-fatal conditions raised through ``warnings``."""
    pass


class NothingToSolveWarning(LongleafWarning):
    """All variables of a three-variable system were supplied."""
    pass


class PartialVolumeWarning(LongleafWarning):
    """Only one of the two bark-type volumes could be computed."""
    pass


# Validation utilities
def validate_positive(value: float, param_name: str) -> float:
    """Validate that a value is strictly positive.

    Args:
        value: Value to validate
        param_name: Parameter name for error message

    Returns:
        The validated value

    Raises:
        DomainError: If value is not positive
    """
    if not value > 0:
        raise DomainError(param_name, value, "must be positive")
    return value


def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a value is zero or positive.

    Raises:
        DomainError: If value is negative
    """
    if not value >= 0:
        raise DomainError(param_name, value, "must not be negative")
    return value


def validate_proportion(value: float, param_name: str) -> float:
    """Validate that a value is a valid proportion (0-1).

    Args:
        value: Value to validate
        param_name: Parameter name for error message

    Returns:
        The validated value

    Raises:
        ValidationError: If value is not in [0, 1]
    """
    if not 0 <= value <= 1:
        raise ValidationError(
            f"Invalid value for parameter '{param_name}': {value} "
            f"(must be a fraction between 0 and 1)"
        )
    return value
