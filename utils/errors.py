from http import HTTPStatus
from typing import List, Optional


class ConversionError(Exception):
    """
    Base class for failures detected before the mapping engine runs.

    Attributes:
        message (str): Short description of the failed precondition
        status_code (HTTPStatus): HTTP status reported to the client
    """
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingFileError(ConversionError):
    """No file was supplied with the request."""


class UnsupportedFileTypeError(ConversionError):
    """The file name does not end in a recognized spreadsheet extension."""


class MalformedRulesError(ConversionError):
    """
    The mappings payload is not valid JSON, not an array, or has invalid elements.

    Attributes:
        fields (List[str]): Locations of the offending values, e.g. "0.columnName"
    """
    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class DecodeError(ConversionError):
    """The uploaded bytes could not be read as a spreadsheet."""
