"""Exception taxonomy for the CFA635 driver."""

from __future__ import annotations


class CFA635Error(Exception):
    """Base class for every error raised by the driver."""


class TransportError(CFA635Error, ConnectionError):
    """The serial link failed; the connection should be torn down."""


class ConnectionClosedError(TransportError):
    """The read pipeline ended or the port is closed."""


class CommandValidationError(CFA635Error, ValueError):
    """A command argument was rejected before anything was sent."""


class PayloadTooLargeError(CommandValidationError):
    pass


class IndexOutOfRangeError(CommandValidationError):
    pass


class InvalidSpriteError(CommandValidationError):
    pass


class CommandFailedError(CFA635Error):
    """The module answered, but not with the expected response."""


class CommandTimeoutError(CFA635Error, TimeoutError):
    """No response arrived within the command timeout."""


class ReportDecodeError(CFA635Error):
    """A report packet could not be turned into a typed report."""


class UnknownReportTypeError(ReportDecodeError):
    pass


class UnknownKeyError(ReportDecodeError):
    pass


class FanDisconnectedError(ReportDecodeError):
    pass


class SensorFaultError(ReportDecodeError):
    pass


class MalformedReportError(ReportDecodeError):
    pass


class ReportTimeoutError(CFA635Error, TimeoutError):
    """No report arrived within the requested wait."""
