"""
statsprobe

Pull-based access to runtime statistics of cache and cluster-channel
management objects, for use from test code.
"""

from .accessor import (
    CACHE_VARIANT,
    CHANNEL_VARIANT,
    StatisticsAccessor,
    StatisticsKind,
    Variant,
)
from .config import StatsConfig, get_config
from .connection import (
    AttributeInfo,
    LocalManagementServer,
    ManagedObject,
    ManagementConnection,
    MBeanInfo,
    get_platform_server,
    local_connection_source,
)
from .errors import (
    AvailabilityTimeout,
    ManagementError,
    ManagementIOError,
    NotSerializableResult,
    ResolutionNotFound,
    RetryExhausted,
    StatisticsError,
)
from .factory import StatisticsFactory, create_statistics, create_statistics_map
from .logger import StatsLogger, get_logger
from .names import ObjectName
from .resolver import NameResolver
from .targets import BackendNode, CacheTarget, ChannelTarget, PatternTarget, default_domain
from .wait import RetryPolicy, TimeUnit, retry, wait_for_statistic

__all__ = [
    "CACHE_VARIANT",
    "CHANNEL_VARIANT",
    "StatisticsAccessor",
    "StatisticsKind",
    "Variant",
    "StatsConfig",
    "get_config",
    "AttributeInfo",
    "LocalManagementServer",
    "ManagedObject",
    "ManagementConnection",
    "MBeanInfo",
    "get_platform_server",
    "local_connection_source",
    "AvailabilityTimeout",
    "ManagementError",
    "ManagementIOError",
    "NotSerializableResult",
    "ResolutionNotFound",
    "RetryExhausted",
    "StatisticsError",
    "StatisticsFactory",
    "create_statistics",
    "create_statistics_map",
    "StatsLogger",
    "get_logger",
    "ObjectName",
    "NameResolver",
    "BackendNode",
    "CacheTarget",
    "ChannelTarget",
    "PatternTarget",
    "default_domain",
    "RetryPolicy",
    "TimeUnit",
    "retry",
    "wait_for_statistic",
]
