"""
Error state for the standin engine
Stable error taxonomy, last-error record, message formatting and the default hook
"""

from typing import Callable, Dict, Optional
from dataclasses import dataclass
from enum import IntEnum

from values import type_name


# ============================================================================
# ERROR TAXONOMY
# ============================================================================

class ErrorKind(IntEnum):
    """Numbers are stable and part of the public contract"""
    FUNCTION_TABLE_FULL = 1
    MAPPING_TABLE_FULL = 2
    MATCHER_TABLE_FULL = 3
    RESPONDER_TABLE_FULL = 4
    NODE_TABLE_FULL = 5
    UNEXPECTED_PARAMETER_TYPE = 6
    UNEXPECTED_RETURN_TYPE = 7
    INVALID_TYPE = 8
    INVALID_OPERATOR = 9
    FUNCTION_NOT_FOUND = 10
    NO_MAPPING_MATCHED = 11
    INVALID_MATCHER_PLACEMENT = 12
    INVALID_PARAMETER_INDEX = 13


ERROR_DESCRIPTIONS: Dict[ErrorKind, str] = {
    ErrorKind.FUNCTION_TABLE_FULL: "insufficient memory for functions",
    ErrorKind.MAPPING_TABLE_FULL: "insufficient memory for mappings",
    ErrorKind.MATCHER_TABLE_FULL: "insufficient memory for matchers",
    ErrorKind.RESPONDER_TABLE_FULL: "insufficient memory for responders",
    ErrorKind.NODE_TABLE_FULL: "insufficient memory for list nodes",
    ErrorKind.UNEXPECTED_PARAMETER_TYPE: "unexpected parameter type",
    ErrorKind.UNEXPECTED_RETURN_TYPE: "unexpected return type",
    ErrorKind.INVALID_TYPE: "invalid parameter type",
    ErrorKind.INVALID_OPERATOR: "invalid comparison operator",
    ErrorKind.FUNCTION_NOT_FOUND: "function not found in mappings",
    ErrorKind.NO_MAPPING_MATCHED: "no mappings matched for call",
    ErrorKind.INVALID_MATCHER_PLACEMENT: "invalid place for matcher",
    ErrorKind.INVALID_PARAMETER_INDEX: "invalid parameter number",
}

# Longest function name kept in a formatted message
MAX_NAME_LENGTH = 64


# ============================================================================
# LAST ERROR
# ============================================================================

@dataclass(frozen=True)
class LastError:
    """Data of the last engine failure, enough to rebuild its message"""
    kind: ErrorKind
    funcname: str
    pos: int = 0
    actual_type: int = 0
    expected_type: int = 0

    @property
    def description(self) -> str:
        return ERROR_DESCRIPTIONS.get(self.kind, "")


def format_error_message(error: Optional[LastError]) -> str:
    """'err_desc: func_name (n_param): (actual_type)<>(expected_type)'

    The position is left out when it is zero. The type part only appears when
    an expected type was recorded or the two recorded types differ.
    """
    if error is None:
        return ""
    message = f"{error.description}: {error.funcname[:MAX_NAME_LENGTH]}"
    if error.pos > 0:
        message += f" ({error.pos})"
    if error.expected_type or error.expected_type != error.actual_type:
        message += f": {type_name(error.actual_type)}"
        if error.expected_type != error.actual_type:
            message += f"<>{type_name(error.expected_type)}"
    return message


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class StandinError(Exception):
    """Raised by the default error hook with the last engine failure"""
    def __init__(self, error: LastError):
        self.error = error
        self.kind = error.kind
        self.message = format_error_message(error)
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class TypeDeclarationError(Exception):
    """Bad C type declaration given where a type tag was expected"""
    def __init__(self, message: str, text: str = "", location: int = 0):
        self.message = message
        self.text = text
        self.location = location
        super().__init__(message)

    def __str__(self) -> str:
        if not self.text:
            return f"Type declaration error: {self.message}"
        marker = " " * self.location + "^"
        return (f"Type declaration error at column {self.location + 1}: {self.message}\n"
                f"  {self.text}\n"
                f"  {marker}")


# ============================================================================
# ERROR HOOKS
# ============================================================================

ErrorHook = Callable[[LastError], None]


def raise_on_error(error: LastError) -> None:
    """Default hook: turn the failure into an exception that fails the test"""
    raise StandinError(error)
