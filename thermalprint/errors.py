"""Exceptions raised by thermalprint."""


class ThermalPrintError(Exception):
    """Base class for all thermalprint errors."""


class MethodCallError(ThermalPrintError):
    """An error reported to the caller of the method bridge as a structured error."""

    code = "ERROR"

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class PermissionDeniedError(MethodCallError):
    code = "PERMISSION_DENIED"


class UnavailableError(MethodCallError):
    code = "UNAVAILABLE"


class InvalidArgumentsError(MethodCallError):
    code = "INVALID_ARGUMENTS"


class NotImplementedMethodError(MethodCallError):
    code = "NOT_IMPLEMENTED"


class TransportError(ThermalPrintError, ConnectionError):
    """I/O failure while opening or writing to a printer connection."""


class NotConnectedError(ThermalPrintError):
    """Operation attempted without a live connection."""
