"""
Statistics Factory

Builds accessors from target descriptors. Test setup calls it
explicitly instead of having fields populated behind its back.

Usage:
    factory = StatisticsFactory()
    stats = factory.create(CacheTarget("sessions"), source)

    accessors = create_statistics_map({
        "sessions": (CacheTarget("sessions"), source),
        "channel": (ChannelTarget("ejb"), source),
    })
"""

from typing import Dict, Mapping, Optional, Tuple

from .accessor import StatisticsAccessor
from .config import StatsConfig, get_config
from .connection import ConnectionSource
from .errors import RetryExhausted
from .logger import StatsLogger, get_logger
from .targets import StatisticsTarget
from .wait import Sleep, retry


class StatisticsFactory:
    """
    Creates statistics accessors.

    Accessors for dynamically addressed targets get a best-effort reset
    right away. If it fails, a warning is logged only when the target's
    node is known to be running; otherwise the object may just not exist
    yet and the failure is ignored.
    """

    def __init__(
        self,
        config: Optional[StatsConfig] = None,
        logger: Optional[StatsLogger] = None,
        sleep: Optional[Sleep] = None
    ):
        self.config = config if config is not None else get_config()
        self.logger = logger if logger is not None else get_logger()
        self.sleep = sleep

    def create(self, target: StatisticsTarget, connection_source: ConnectionSource) -> StatisticsAccessor:
        template = target.template(self.config)
        accessor = StatisticsAccessor(
            connection_source,
            template,
            target.kind,
            logger=self.logger,
            sleep=self.sleep,
            poll_interval_ms=self.config.poll_interval_ms
        )

        if target.dynamic_domain:
            self._reset_best_effort(accessor, target)

        return accessor

    def _reset_best_effort(self, accessor: StatisticsAccessor, target: StatisticsTarget):
        try:
            retry(
                accessor.reset,
                self.config.reset_attempts,
                self.config.reset_delay_ms,
                sleep=self.sleep
            )
        except RetryExhausted as ex:
            if target.node is not None and target.node.started():
                self.logger.warning(
                    "stats_reset_failed",
                    f'Could not reset statistics for {accessor.template}. The reason is: "{ex.last_error}"',
                    template=str(accessor.template),
                    attempts=ex.attempts,
                    error_type=type(ex.last_error).__name__
                )

    def create_all(
        self,
        targets: Mapping[str, Tuple[StatisticsTarget, ConnectionSource]]
    ) -> Dict[str, StatisticsAccessor]:
        return {
            key: self.create(target, source)
            for key, (target, source) in targets.items()
        }


def create_statistics(
    target: StatisticsTarget,
    connection_source: ConnectionSource,
    **kwargs
) -> StatisticsAccessor:
    """Create one accessor with a StatisticsFactory(**kwargs)."""
    return StatisticsFactory(**kwargs).create(target, connection_source)


def create_statistics_map(
    targets: Mapping[str, Tuple[StatisticsTarget, ConnectionSource]],
    **kwargs
) -> Dict[str, StatisticsAccessor]:
    """Create accessors for named (target, connection source) pairs."""
    return StatisticsFactory(**kwargs).create_all(targets)
