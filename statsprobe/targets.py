"""
Statistics Targets

Declarative descriptions of what a test wants statistics for. A target
knows its kind and how to build its name template; the factory turns
it into an accessor.

Name formats:
    cache:   <domain>:type=<type>,name="<cache>(<mode>)",manager="<manager>",component=<component>
    channel: <domain>:type=<type>,cluster="<cluster>"
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .accessor import StatisticsKind
from .config import CROSSDC_JMX_DOMAIN, StatsConfig, get_config
from .constants import COMPONENT_STATISTICS, TYPE_CACHE, TYPE_CHANNEL
from .names import ObjectName, as_object_name


@dataclass(frozen=True)
class BackendNode:
    """
    The backend node a target lives on.

    Attributes:
        dc_index: Data center index
        node_index: Node index within the data center
        qualifier: Node qualifier used in per-node domains
        is_started: Reports whether the node is known to be running
    """
    dc_index: int
    node_index: int
    qualifier: Optional[str] = None
    is_started: Optional[Callable[[], bool]] = None

    def started(self) -> bool:
        return self.is_started is not None and bool(self.is_started())


def default_domain(node: Optional[BackendNode] = None, config: Optional[StatsConfig] = None) -> str:
    """
    Pick the management domain for a dynamically addressed target.

    - No node: the standalone cache server domain
    - Cross-DC backend node: the clustered server domain
    - Other backend node: the embedded domain suffixed with the node qualifier
    """
    if config is None:
        config = get_config()

    if node is None:
        return config.jmx_domain

    if config.crossdc:
        return CROSSDC_JMX_DOMAIN

    if not node.qualifier:
        raise ValueError(
            f"Backend node {node.dc_index}/{node.node_index} needs a qualifier for its domain"
        )
    return f"{config.jmx_domain}-{node.qualifier}"


class StatisticsTarget:
    """Base for target descriptors."""

    kind: StatisticsKind
    domain: Optional[str] = None
    node: Optional[BackendNode] = None

    @property
    def dynamic_domain(self) -> bool:
        """True when the domain is derived rather than given explicitly."""
        return self.domain is None

    def resolve_domain(self, config: Optional[StatsConfig] = None) -> str:
        if self.domain is not None:
            return self.domain
        return default_domain(self.node, config)

    def template(self, config: Optional[StatsConfig] = None) -> ObjectName:
        raise NotImplementedError


@dataclass(frozen=True)
class CacheTarget(StatisticsTarget):
    """Statistics component of a cache."""
    cache_name: str = "*"
    cache_mode: str = "*"
    manager: str = "*"
    type: str = TYPE_CACHE
    component: str = COMPONENT_STATISTICS
    domain: Optional[str] = None
    node: Optional[BackendNode] = None

    kind = StatisticsKind.CACHE

    def template(self, config: Optional[StatsConfig] = None) -> ObjectName:
        return ObjectName(
            f'{self.resolve_domain(config)}:type={self.type},'
            f'name="{self.cache_name}({self.cache_mode})",'
            f'manager="{self.manager}",component={self.component}'
        )


@dataclass(frozen=True)
class ChannelTarget(StatisticsTarget):
    """Cluster transport channel."""
    cluster: str = "*"
    type: str = TYPE_CHANNEL
    domain: Optional[str] = None
    node: Optional[BackendNode] = None

    kind = StatisticsKind.CHANNEL

    def template(self, config: Optional[StatsConfig] = None) -> ObjectName:
        return ObjectName(f'{self.resolve_domain(config)}:type={self.type},cluster="{self.cluster}"')


@dataclass(frozen=True)
class PatternTarget(StatisticsTarget):
    """An explicit name template; never reset on creation."""
    pattern: str
    kind: StatisticsKind = StatisticsKind.CACHE
    node: Optional[BackendNode] = None

    @property
    def dynamic_domain(self) -> bool:
        return False

    @property
    def domain(self) -> str:
        return as_object_name(self.pattern).domain

    def template(self, config: Optional[StatsConfig] = None) -> ObjectName:
        return as_object_name(self.pattern)
