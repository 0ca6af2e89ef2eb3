"""
Statistics Accessors

A statistics accessor reads, resets and waits on one management object
found through a name template. Cache and channel accessors share one
engine and differ only in their Variant record: the reset operation,
the readiness attribute with its predicate, and which reset failures
are harmless.

Usage:
    stats = StatisticsAccessor(source, template, StatisticsKind.CACHE)
    stats.wait_to_become_available(10, TimeUnit.SECONDS)
    hits = stats.get_single_statistics(STAT_CACHE_HITS)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

from .config import get_config
from .connection import ConnectionSource
from .constants import (
    OPERATION_CACHE_RESET,
    OPERATION_CHANNEL_RESET,
    STAT_CACHE_ELAPSED_TIME,
    STAT_CHANNEL_CONNECTED,
)
from .errors import (
    AttributeNotFound,
    AvailabilityTimeout,
    ManagementError,
    NotSerializableResult,
    RetryExhausted,
    StatisticsError,
)
from .logger import StatsLogger, get_logger
from .names import ObjectName
from .resolver import NameResolver
from .wait import RetryPolicy, Sleep, TimeUnit

# Failures raised by connections and connection sources
_CONNECTION_ERRORS = (OSError, ManagementError)


def _is_present(value: Any) -> bool:
    return value is not None


def _is_true(value: Any) -> bool:
    return value is True


@dataclass(frozen=True)
class Variant:
    """What distinguishes one kind of statistics object from another."""
    name: str
    reset_operation: str
    readiness_attribute: str
    is_ready: Callable[[Any], bool]
    tolerated_reset_errors: Tuple[Type[BaseException], ...] = ()


# Cache statistics carry elapsedTime only once the cache has started
CACHE_VARIANT = Variant(
    name="cache",
    reset_operation=OPERATION_CACHE_RESET,
    readiness_attribute=STAT_CACHE_ELAPSED_TIME,
    is_ready=_is_present,
)

# resetStats runs before its result is marshalled, so a marshalling
# failure still means the counters were reset
CHANNEL_VARIANT = Variant(
    name="channel",
    reset_operation=OPERATION_CHANNEL_RESET,
    readiness_attribute=STAT_CHANNEL_CONNECTED,
    is_ready=_is_true,
    tolerated_reset_errors=(NotSerializableResult,),
)


class StatisticsKind(Enum):
    CACHE = "cache"
    CHANNEL = "channel"

    @property
    def variant(self) -> Variant:
        return _VARIANTS[self]


_VARIANTS = {
    StatisticsKind.CACHE: CACHE_VARIANT,
    StatisticsKind.CHANNEL: CHANNEL_VARIANT,
}


class StatisticsAccessor:
    """
    Statistics of one management object.

    The connection source is called once per operation and the handle is
    dropped afterwards. The object name is resolved on first use and kept
    for the life of the accessor.

    Only exists() swallows failures. Every other operation raises
    StatisticsError chained to the connection failure, and never retries
    on its own.
    """

    def __init__(
        self,
        connection_source: ConnectionSource,
        template,
        variant: Union[StatisticsKind, Variant] = StatisticsKind.CACHE,
        logger: Optional[StatsLogger] = None,
        sleep: Optional[Sleep] = None,
        poll_interval_ms: Optional[int] = None
    ):
        self._connection_source = connection_source
        self._resolver = NameResolver(template)
        self.variant = variant.variant if isinstance(variant, StatisticsKind) else variant
        self._log = logger if logger is not None else get_logger()
        self._sleep = sleep
        self._poll_interval_ms = poll_interval_ms or get_config().poll_interval_ms

    @property
    def template(self) -> ObjectName:
        return self._resolver.template

    @property
    def object_name(self) -> Optional[ObjectName]:
        """The resolved object name, or None before the first resolution."""
        return self._resolver.resolved

    def _connection(self):
        return self._connection_source()

    def _resolve(self, connection) -> ObjectName:
        first = self._resolver.resolved is None
        name = self._resolver.resolve(connection)
        if first:
            self._log.info(
                "mbean_resolved",
                f"{self.template} resolved to {name}",
                template=str(self.template),
                object_name=str(name)
            )
        return name

    def _object_name(self) -> ObjectName:
        return self._resolve(self._connection())

    def exists(self) -> bool:
        """Check whether the template resolves to an object."""
        try:
            self._object_name()
            return True
        except (StatisticsError,) + _CONNECTION_ERRORS:
            return False

    def get_statistics(self) -> Dict[str, Any]:
        """
        Read every readable attribute of the object.

        Returns:
            Fresh dict of attribute name to value

        Raises:
            StatisticsError: If resolution, introspection or the fetch fails
        """
        try:
            connection = self._connection()
            name = self._resolve(connection)
            info = connection.get_mbean_info(name)
            readable = [attribute.name for attribute in info.attributes if attribute.readable]
            return dict(connection.get_attributes(name, readable))
        except _CONNECTION_ERRORS as e:
            raise StatisticsError(f"Could not read statistics of {self.template}: {e}") from e

    def get_single_statistics(self, statistics_name: str) -> Any:
        """
        Read one attribute of the object.

        Raises:
            StatisticsError: If the attribute is absent or unreadable, or
                the endpoint is unreachable
        """
        try:
            connection = self._connection()
            return connection.get_attribute(self._resolve(connection), statistics_name)
        except _CONNECTION_ERRORS as e:
            raise StatisticsError(
                f"Could not read {statistics_name} of {self.template}: {e}"
            ) from e

    def reset(self):
        """Invoke the variant's reset operation on the object."""
        try:
            connection = self._connection()
            connection.invoke(self._resolve(connection), self.variant.reset_operation, (), ())
        except self.variant.tolerated_reset_errors:
            return
        except _CONNECTION_ERRORS as e:
            raise StatisticsError(f"Could not reset statistics of {self.template}: {e}") from e

    def is_available(self) -> bool:
        """
        Apply the variant's readiness predicate.

        A missing readiness attribute counts as not ready.
        """
        try:
            value = self.get_single_statistics(self.variant.readiness_attribute)
        except StatisticsError as e:
            if isinstance(e.__cause__, AttributeNotFound):
                value = None
            else:
                raise
        return self.variant.is_ready(value)

    def wait_to_become_available(self, timeout: float, unit: TimeUnit = TimeUnit.SECONDS):
        """
        Poll until the object resolves and is ready.

        Polls every poll interval (100ms by default), 1 + timeout // interval
        times in total.

        Raises:
            AvailabilityTimeout: If the object never became ready
        """
        policy = RetryPolicy.for_timeout(timeout, unit, self._poll_interval_ms)

        def attempt():
            self._object_name()
            if not self.is_available():
                raise StatisticsError(f"{self.template} is not available")

        try:
            policy.run(attempt, sleep=self._sleep)
        except RetryExhausted as e:
            self._log.error(
                "availability_timeout",
                f"{self.template} not available after {e.attempts} attempts",
                error_type=type(e.last_error).__name__,
                template=str(self.template),
                attempts=e.attempts
            )
            raise AvailabilityTimeout(self.template, e.attempts, e.last_error) from e.last_error

        self._log.info(
            "availability_reached",
            f"{self.template} is available",
            template=str(self.template),
            object_name=str(self.object_name)
        )

    def __repr__(self):
        return f"StatisticsAccessor({self.variant.name}, {self.template})"
