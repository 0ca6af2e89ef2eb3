"""
statsprobe - Shared Test Fixtures

Provides deterministic polling (a recording sleep instead of real
delays), quiet loggers, and fresh local management servers so tests
never depend on wall-clock timing or on process-wide state.

Usage:
    def test_something(server, connection, source, sleep, logger):
        server.register(name, cache_object(elapsedTime=1))
        stats = StatisticsAccessor(source, template, logger=logger, sleep=sleep)

Environment Variables:
    STATS_*: Ignored by default; each test starts from StatsConfig() defaults
"""

import pytest

from statsprobe import config as stats_config
from statsprobe.config import StatsConfig
from statsprobe.connection import LocalManagementServer, reset_platform_server
from statsprobe.logger import StatsLogger, close_all_loggers

from tests.utilities import ConnectionSourceSpy, CountingConnection, RecordingSleep


@pytest.fixture(autouse=True)
def default_config():
    """Pin configuration to defaults, independent of the environment."""
    stats_config.set_config(StatsConfig(log_console=False))
    yield
    close_all_loggers()
    stats_config.reset_config()
    reset_platform_server()


@pytest.fixture
def server():
    return LocalManagementServer()


@pytest.fixture
def connection(server):
    return CountingConnection(server)


@pytest.fixture
def source(connection):
    return ConnectionSourceSpy(connection)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def logger(tmp_path):
    with StatsLogger("test", output_dir=tmp_path, console_output=False) as log:
        yield log
