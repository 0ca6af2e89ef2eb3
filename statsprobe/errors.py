"""
Statistics Errors

Two families of exceptions live here:

- Connection-side failures raised by a management connection
  (``ManagementIOError`` for transport problems, ``ManagementError``
  subclasses for protocol-level problems).
- Accessor-side failures raised to test code (``StatisticsError`` and
  its subclasses). These always chain the connection-side cause.
"""

from typing import Optional


class ManagementError(Exception):
    """Protocol-level failure reported by a management endpoint."""
    pass


class InstanceNotFound(ManagementError):
    """The named management object is not registered."""
    pass


class AttributeNotFound(ManagementError):
    """The management object has no such attribute."""
    pass


class AttributeNotReadable(ManagementError):
    """The attribute exists but cannot be read."""
    pass


class OperationNotFound(ManagementError):
    """The management object has no such operation."""
    pass


class OperationFailed(ManagementError):
    """A getter or operation raised on the managed side."""
    pass


class ManagementIOError(OSError):
    """Transport failure while talking to a management endpoint."""
    pass


class NotSerializableResult(ManagementIOError):
    """
    An operation ran but its return value could not be marshalled back.

    The side effect on the managed side has already happened.
    """
    pass


class MalformedObjectName(ValueError):
    """Raised when an object name string cannot be parsed."""
    pass


class StatisticsError(RuntimeError):
    """Fatal failure of a statistics accessor operation."""
    pass


class ResolutionNotFound(StatisticsError):
    """No management object matches a name template."""

    def __init__(self, template):
        self.template = template
        super().__init__(f"No MBean of template {template} found at management server")


class RetryExhausted(StatisticsError):
    """Every attempt of a bounded retry failed."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")


class AvailabilityTimeout(StatisticsError):
    """A statistics target did not become available in time."""

    def __init__(self, template, attempts: int, last_error: Optional[BaseException]):
        self.template = template
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Timed out while waiting for {template} to become available "
            f"({attempts} attempts, last error: {last_error})"
        )
