"""
Error taxonomy for tabquery

Every pipeline stage raises exactly one of these, so callers can tell
which stage failed from the exception type alone.
"""

from typing import Optional


class TabQueryError(Exception):
    """Base class for all tabquery errors"""

    pass


class ParseError(TabQueryError):
    """Raised when statement text cannot be parsed"""

    def __init__(self, message: str, position: Optional[int] = None, token: Optional[str] = None):
        self.position = position
        self.token = token
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)


class ResolveError(TabQueryError):
    """Raised for an empty locator or an unsupported format"""

    pass


class LoadError(TabQueryError):
    """Raised when the bytes behind a locator cannot be fetched"""

    def __init__(self, message: str, location: Optional[str] = None, attempts: int = 1):
        self.location = location
        self.attempts = attempts
        super().__init__(message)


class DecodeError(TabQueryError):
    """Raised for malformed resource content"""

    def __init__(self, message: str, row: Optional[int] = None):
        self.row = row
        super().__init__(message)


class TypeInferenceError(TabQueryError):
    """Reserved: inference currently always falls back to STRING"""

    pass


class ExecError(TabQueryError):
    """Raised during query evaluation (unknown column, bad types, ...)"""

    pass


class ValidationError(ExecError):
    """Raised by the validation pass, before any data is loaded"""

    pass
