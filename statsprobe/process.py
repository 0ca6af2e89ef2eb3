"""
Process Statistics

Exposes live statistics of a local process as a management object,
so a cache-kind accessor can read, reset and wait on it like any
remote cache.
"""

import os
import time
from typing import Optional

import psutil

from .connection import LocalManagementServer, ManagedObject
from .constants import (
    OPERATION_CACHE_RESET,
    STAT_CACHE_ELAPSED_TIME,
    STAT_CACHE_TIME_SINCE_RESET,
)
from .errors import InstanceNotFound
from .names import ObjectName

PROCESS_DOMAIN = "python.runtime"


class ProcessStatistics:
    """
    psutil-backed statistics of one process.

    Attributes:
        elapsedTime: Seconds since the process started
        timeSinceReset: Seconds since the last resetStatistics call
        cpuPercent: CPU utilization since the previous read
        memoryRssMb: Resident set size in MB
        memoryPercent: Share of physical memory in use
        numThreads: Thread count
        status: psutil process status
    """

    def __init__(self, pid: Optional[int] = None):
        self.pid = pid if pid is not None else os.getpid()
        self._process = psutil.Process(self.pid)
        self._reset_at = time.time()
        # Prime the CPU counter; the first call always reports 0.0
        self._process.cpu_percent(interval=None)

    def _call(self, getter):
        try:
            return getter()
        except psutil.NoSuchProcess as e:
            raise InstanceNotFound(f"Process {self.pid} is gone") from e

    def elapsed_time(self) -> int:
        return int(time.time() - self._call(self._process.create_time))

    def time_since_reset(self) -> int:
        return int(time.time() - self._reset_at)

    def cpu_percent(self) -> float:
        return self._call(lambda: self._process.cpu_percent(interval=None))

    def memory_rss_mb(self) -> float:
        return self._call(self._process.memory_info).rss / (1024 * 1024)

    def memory_percent(self) -> float:
        return self._call(self._process.memory_percent)

    def num_threads(self) -> int:
        return self._call(self._process.num_threads)

    def status(self) -> str:
        return self._call(self._process.status)

    def reset_statistics(self):
        """Restart the reset-relative counters."""
        self._reset_at = time.time()
        self._process.cpu_percent(interval=None)

    def as_managed_object(self) -> ManagedObject:
        return ManagedObject(
            attributes={
                STAT_CACHE_ELAPSED_TIME: self.elapsed_time,
                STAT_CACHE_TIME_SINCE_RESET: self.time_since_reset,
                "cpuPercent": self.cpu_percent,
                "memoryRssMb": self.memory_rss_mb,
                "memoryPercent": self.memory_percent,
                "numThreads": self.num_threads,
                "status": self.status,
            },
            operations={OPERATION_CACHE_RESET: self.reset_statistics},
            class_name="statsprobe.process.ProcessStatistics",
            description=f"Statistics of process {self.pid}",
        )


def process_object_name(pid: int, domain: str = PROCESS_DOMAIN) -> ObjectName:
    return ObjectName(f"{domain}:type=Process,pid={pid}")


def register_process_statistics(
    server: LocalManagementServer,
    pid: Optional[int] = None,
    domain: str = PROCESS_DOMAIN
) -> ObjectName:
    """
    Register statistics of a process on a local server.

    Args:
        server: Server to register on
        pid: Process ID (default: current process)
        domain: Management domain

    Returns:
        The registered object name
    """
    stats = ProcessStatistics(pid)
    return server.register(process_object_name(stats.pid, domain), stats.as_managed_object())
