#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
pchtxt2ips - Consolidated Exception Classes

All exception classes used by the project live here so that the parser,
the IPS reader and the configuration layer report errors the same way.
"""

from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# Configuration-related errors
# =====================================================================================================

class ConfigurationError(BaseError):
    """Base class for configuration errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, error_code or "CONFIG_ERROR", config_details)


class ValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        validation_details = details or {}
        if field_name:
            validation_details['field_name'] = field_name
        super().__init__(message, "VALIDATION_ERROR", file_path, validation_details)


# =====================================================================================================
# IO-related errors
# =====================================================================================================

class FileOperationError(BaseError):
    """Raised when reading an input or writing an output file fails."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 operation: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        file_details = details or {}
        if file_path:
            file_details['file_path'] = str(file_path)
        if operation:
            file_details['operation'] = operation
        super().__init__(message, "FILE_OP_ERROR", file_details)


# =====================================================================================================
# Patch text errors
# =====================================================================================================

class PatchTextError(BaseError):
    """Base class for fatal patch text errors. Any of these aborts a parse."""

    def __init__(self, message: str, line_num: int = 0, line_text: str = "",
                 error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.line_num = line_num
        self.line_text = line_text
        text_details = details or {}
        if line_num:
            text_details['line_num'] = line_num
        if line_text:
            text_details['line_text'] = line_text
        super().__init__(message, error_code or "PCHTXT_ERROR", text_details)


class MissingBuildIdError(PatchTextError):
    """Raised when a patch or cheat starts before any build id was set."""

    def __init__(self, line_num: int = 0, line_text: str = ""):
        super().__init__("missing build id, abort parsing", line_num, line_text,
                         "MISSING_BUILD_ID")


class InvalidBuildIdError(PatchTextError):
    """Raised when a legacy @nsobid tag carries no value."""

    def __init__(self, line_num: int = 0, line_text: str = ""):
        super().__init__("legacy nsobid tag missing value", line_num, line_text,
                         "INVALID_BUILD_ID")


class OffsetRangeError(PatchTextError):
    """Raised when an offset does not fit in 32 bits."""

    def __init__(self, offset: str, line_num: int = 0, line_text: str = ""):
        super().__init__(f"offset: {offset} out of range", line_num, line_text,
                         "OFFSET_RANGE", {'offset': offset})


class OffsetShiftError(PatchTextError):
    """Raised when an offset_shift flag value is not an integer."""

    def __init__(self, value: str, line_num: int = 0, line_text: str = ""):
        super().__init__(f"invalid offset shift value: {value!r}", line_num, line_text,
                         "OFFSET_SHIFT", {'value': value})


class UnterminatedStringError(PatchTextError):
    """Raised when a quoted value has no closing quote."""

    def __init__(self, value: str, line_num: int = 0, line_text: str = ""):
        super().__init__(f"cannot find string closing: {value}", line_num, line_text,
                         "UNTERMINATED_STRING")


class HexValueError(PatchTextError):
    """Raised for odd-length or non-hex value tokens."""

    def __init__(self, message: str, token: str, line_num: int = 0, line_text: str = ""):
        super().__init__(f"{message}: {token}", line_num, line_text,
                         "HEX_VALUE", {'token': token})


# =====================================================================================================
# Binary patch container errors
# =====================================================================================================

class IpsFormatError(BaseError):
    """Raised when an IPS or IPS32 container is malformed."""

    def __init__(self, message: str, position: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        ips_details = details or {}
        if position is not None:
            ips_details['position'] = position
        super().__init__(message, "IPS_FORMAT_ERROR", ips_details)
