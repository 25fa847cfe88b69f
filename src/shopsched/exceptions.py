"""Custom exceptions for shopsched."""


class ShopSchedError(Exception):
    """Base exception for all shopsched errors."""

    pass


class ValidationError(ShopSchedError):
    """Raised when schedule construction input is invalid."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when the precedence graph contains a cycle."""

    pass


class MissingReferenceError(ValidationError):
    """Raised when a referenced machine, job or task ID does not exist."""

    pass


class ParseError(ShopSchedError):
    """Raised when a config file or duration string cannot be parsed."""

    pass
