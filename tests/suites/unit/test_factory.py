"""
Test: Targets and Statistics Factory

Validates building accessors from target descriptors:
- Template formats and default domains
- Best-effort reset on creation for dynamically addressed targets
- Warning only when the target node is known to be running

Tier: 0 (Required on every merge)
"""

import pytest

from statsprobe.accessor import StatisticsKind
from statsprobe.config import StatsConfig
from statsprobe.errors import ManagementIOError
from statsprobe.factory import StatisticsFactory, create_statistics, create_statistics_map
from statsprobe.names import ObjectName
from statsprobe.targets import BackendNode, CacheTarget, ChannelTarget, PatternTarget, default_domain

from tests.utilities import cache_object, channel_object, read_events

CACHE_NAME = 'jboss.datagrid-infinispan:type=Cache,name="sessions(repl_sync)",manager="clustered",component=Statistics'
CHANNEL_NAME = 'jboss.datagrid-infinispan:type=channel,cluster="ejb"'


@pytest.fixture
def factory(logger, sleep):
    return StatisticsFactory(config=StatsConfig(log_console=False), logger=logger, sleep=sleep)


class TestTargets:

    def test_cache_template(self):
        template = CacheTarget("sessions", cache_mode="repl_sync", manager="clustered").template()
        assert template == ObjectName(CACHE_NAME)

    def test_cache_template_defaults_to_wildcards(self):
        template = CacheTarget("sessions").template()
        assert str(template) == (
            'jboss.datagrid-infinispan:type=Cache,name="sessions(*)",manager="*",component=Statistics'
        )
        assert template.matches(ObjectName(CACHE_NAME))

    def test_channel_template(self):
        template = ChannelTarget("ejb").template()
        assert template == ObjectName(CHANNEL_NAME)
        assert ChannelTarget().template().matches(ObjectName(CHANNEL_NAME))

    def test_explicit_domain(self):
        target = CacheTarget("work", domain="org.infinispan")
        assert not target.dynamic_domain
        assert target.template().domain == "org.infinispan"

    def test_pattern_target(self):
        target = PatternTarget("python.runtime:type=Process,*", StatisticsKind.CACHE)
        assert not target.dynamic_domain
        assert target.domain == "python.runtime"
        assert target.template() == ObjectName("python.runtime:type=Process,*")

    def test_kinds(self):
        assert CacheTarget().kind is StatisticsKind.CACHE
        assert ChannelTarget().kind is StatisticsKind.CHANNEL


class TestDefaultDomain:

    def test_cache_server(self):
        assert default_domain(None, StatsConfig()) == "jboss.datagrid-infinispan"

    def test_configured_domain(self):
        assert default_domain(None, StatsConfig(jmx_domain="custom")) == "custom"

    def test_embedded_backend_node(self):
        node = BackendNode(dc_index=0, node_index=1, qualifier="auth-server-undertow-dc0-1")
        assert default_domain(node, StatsConfig()) == "jboss.datagrid-infinispan-auth-server-undertow-dc0-1"

    def test_crossdc_backend_node(self):
        node = BackendNode(dc_index=1, node_index=0, qualifier="ignored")
        assert default_domain(node, StatsConfig(crossdc=True)) == "org.wildfly.clustering.infinispan"

    def test_backend_node_needs_qualifier(self):
        with pytest.raises(ValueError):
            default_domain(BackendNode(0, 0), StatsConfig())

    def test_target_uses_node_domain(self):
        node = BackendNode(0, 0, qualifier="node0")
        target = ChannelTarget("ejb", node=node)
        assert target.template(StatsConfig()).domain == "jboss.datagrid-infinispan-node0"


class TestCreate:

    def test_resets_dynamic_target_on_creation(self, server, source, factory):
        obj = cache_object(hits=5)
        server.register(CACHE_NAME, obj)

        stats = factory.create(CacheTarget("sessions"), source)

        assert obj.resets == [1]
        assert stats.object_name == ObjectName(CACHE_NAME)

    def test_channel_reset_on_creation(self, server, source, factory):
        obj = channel_object()
        server.register(CHANNEL_NAME, obj)

        factory.create(ChannelTarget("ejb"), source)

        assert obj.resets == [1]

    def test_explicit_domain_is_not_reset(self, server, source, factory):
        obj = cache_object()
        server.register(CACHE_NAME, obj)

        factory.create(CacheTarget("sessions", domain="jboss.datagrid-infinispan"), source)

        assert obj.resets == []
        assert source.calls == 0

    def test_pattern_target_is_not_reset(self, server, source, factory):
        obj = cache_object()
        server.register(CACHE_NAME, obj)

        factory.create(PatternTarget('jboss.datagrid-infinispan:type=Cache,*'), source)

        assert obj.resets == []

    def test_reset_retried_once(self, server, connection, sleep, factory):
        obj = cache_object()
        server.register(CACHE_NAME, obj)
        connection.fail("invoke", ManagementIOError("busy"), times=1)

        factory.create(CacheTarget("sessions"), lambda: connection)

        assert connection.calls["invoke"] == 2
        assert obj.resets == [1]
        assert sleep.calls == [0.15]

    def test_missing_object_is_silently_ignored(self, source, sleep, logger, factory):
        stats = factory.create(CacheTarget("sessions"), source)

        assert not stats.exists()
        assert sleep.calls == [0.15]
        assert not any(e["event_type"] == "stats_reset_failed" for e in read_events(logger.log_file))

    def test_failure_ignored_when_node_not_started(self, source, logger, factory):
        node = BackendNode(0, 0, qualifier="node0", is_started=lambda: False)

        factory.create(CacheTarget("sessions", node=node), source)

        assert not any(e["event_type"] == "stats_reset_failed" for e in read_events(logger.log_file))

    def test_failure_warned_when_node_started(self, source, logger, factory):
        node = BackendNode(0, 0, qualifier="node0", is_started=lambda: True)

        factory.create(CacheTarget("sessions", node=node), source)

        warnings = [e for e in read_events(logger.log_file) if e["event_type"] == "stats_reset_failed"]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARN"
        assert warnings[0]["attempts"] == 2
        assert warnings[0]["error_type"] == "ResolutionNotFound"
        assert "Could not reset statistics for" in warnings[0]["message"]
        assert "jboss.datagrid-infinispan-node0" in warnings[0]["template"]

    def test_reset_attempts_follow_config(self, server, connection, logger, sleep):
        server.register(CACHE_NAME, cache_object())
        connection.fail("invoke", ManagementIOError("busy"))
        factory = StatisticsFactory(
            config=StatsConfig(reset_attempts=4, reset_delay_ms=20),
            logger=logger,
            sleep=sleep
        )

        factory.create(CacheTarget("sessions"), lambda: connection)

        assert connection.calls["invoke"] == 4
        assert sleep.calls == [0.02, 0.02, 0.02]


class TestCreateMap:

    def test_builds_named_accessors(self, server, source, logger, sleep):
        server.register(CACHE_NAME, cache_object(elapsedTime=1))
        server.register(CHANNEL_NAME, channel_object(connected=True))

        accessors = create_statistics_map(
            {
                "sessions": (CacheTarget("sessions"), source),
                "channel": (ChannelTarget("ejb"), source),
            },
            logger=logger,
            sleep=sleep
        )

        assert set(accessors) == {"sessions", "channel"}
        assert accessors["sessions"].variant.name == "cache"
        assert accessors["channel"].variant.name == "channel"
        assert accessors["sessions"].is_available()
        assert accessors["channel"].is_available()

    def test_create_statistics_uses_global_config(self, server, source, logger, sleep):
        server.register(CACHE_NAME, cache_object(hits=3))

        stats = create_statistics(CacheTarget("sessions"), source, logger=logger, sleep=sleep)

        assert stats.get_single_statistics("hits") == 3
