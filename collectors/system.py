"""Operating system and host collector"""
import os
import platform
import time
from typing import Optional, Union
import psutil
import structlog
from metrics.models import MetricsSet
from .base import BaseCollector

OS_METRICS_COLLECTOR_NAME = "os_metrics"

UNKNOWN = "unknown"

# Report architectures the same way on every platform
ARCHITECTURE_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


def normalize_architecture(machine: str) -> str:
    machine = machine.lower()
    return ARCHITECTURE_ALIASES.get(machine, machine or UNKNOWN)


class OSMetricsCollector(BaseCollector):
    """Collect OS name, architecture, CPU count, Python version, timezone, memory and disk size"""

    def __init__(self, disk_path: Optional[str] = None,
                 logger: Optional[structlog.stdlib.BoundLogger] = None):
        super().__init__(OS_METRICS_COLLECTOR_NAME, "om", logger)
        self.disk_path = disk_path or os.path.abspath(os.sep)

    def collect_metrics(self) -> MetricsSet:
        metrics = self.new_metrics_set()

        metrics.add("os_name", "os", platform.system().lower() or UNKNOWN)
        metrics.add("architecture", "arch", normalize_architecture(platform.machine()))
        metrics.add("cpu_count", "cpu", os.cpu_count() or UNKNOWN)
        metrics.add("python_version", "py_ver", platform.python_version())
        metrics.add("timezone", "tz", self._timezone_name())
        metrics.add("memory_total", "mem", self._memory_total())
        metrics.add("disk_total", "disk", self._disk_total())

        return metrics

    def _timezone_name(self) -> str:
        """Abbreviated name of the local timezone currently in effect"""
        return time.tzname[time.localtime().tm_isdst > 0]

    def _memory_total(self) -> Union[int, str]:
        try:
            return psutil.virtual_memory().total
        except (psutil.Error, OSError) as e:
            self.logger.debug("Could not read total memory", error=str(e))
            return UNKNOWN

    def _disk_total(self) -> Union[int, str]:
        try:
            return psutil.disk_usage(self.disk_path).total
        except (psutil.Error, OSError) as e:
            self.logger.debug("Could not read total disk size", path=self.disk_path, error=str(e))
            return UNKNOWN
