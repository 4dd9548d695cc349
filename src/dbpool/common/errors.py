from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Standardized error codes for datasource configuration."""
    NO_DRIVER_AVAILABLE = "NO_DRIVER_AVAILABLE"
    UNKNOWN_SETTING = "UNKNOWN_SETTING"
    DUPLICATE_DATASOURCE = "DUPLICATE_DATASOURCE"
    DATASOURCE_NOT_FOUND = "DATASOURCE_NOT_FOUND"


class DatasourceConfigurationError(ValueError):
    """Base error for a named datasource that cannot be configured.

    Attributes:
        error_code (ErrorCode): The standardized error code.
        datasource (Optional[str]): Name of the datasource being configured.
    """

    error_code: ErrorCode

    def __init__(self, message: str, datasource: Optional[str] = None):
        self.datasource = datasource
        super().__init__(self.format_message(message, datasource))

    def format_message(self, message: str, datasource: Optional[str]) -> str:
        if datasource:
            return f"Error configuring data source '{datasource}'. {message}"
        return message


class NoDriverAvailable(DatasourceConfigurationError):
    """No URL or driver was configured and no cataloged driver can be imported."""
    error_code = ErrorCode.NO_DRIVER_AVAILABLE

    def __init__(self, datasource: Optional[str] = None, candidates: tuple = ()):
        self.candidates = tuple(candidates)
        message = "No URL or driver class name specified and no embedded driver is installed"
        if self.candidates:
            message += f" (tried: {', '.join(self.candidates)})"
        super().__init__(message, datasource)


class UnknownSettingError(DatasourceConfigurationError):
    error_code = ErrorCode.UNKNOWN_SETTING

    def __init__(self, field: str, datasource: Optional[str] = None):
        self.field = field
        super().__init__(f"Unknown setting '{field}'", datasource)


class DuplicateDatasourceError(DatasourceConfigurationError):
    error_code = ErrorCode.DUPLICATE_DATASOURCE

    def __init__(self, datasource: str):
        super().__init__("Datasource name is already registered", datasource)


class DatasourceNotFoundError(DatasourceConfigurationError, KeyError):
    error_code = ErrorCode.DATASOURCE_NOT_FOUND

    def __init__(self, datasource: str):
        super().__init__(f"Unknown datasource: {datasource}", datasource)

    def format_message(self, message: str, datasource: Optional[str]) -> str:
        return message

    # KeyError would quote the message
    def __str__(self) -> str:
        return self.args[0]
