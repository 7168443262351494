"""
NWIS Retrieval Errors

Every error raised by this package derives from NWISError so callers can
catch the whole family at once. Empty results are not errors: a query that
matches nothing returns an empty table.
"""

from typing import Optional


class NWISError(Exception):
    """Base class for NWIS retrieval failures"""
    pass


class NetworkError(NWISError):
    """Raised when the request fails or the service answers with a non-success status"""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(NWISError):
    """Raised when a response body is not well-formed WaterML or RDB"""
    pass


class FormatError(NWISError):
    """Raised when a column cannot be coerced to the type it must carry"""
    pass
