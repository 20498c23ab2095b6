"""Base collector for telemetry metrics"""
from abc import ABC, abstractmethod
from typing import Optional
import structlog
from logging_config import get_logger
from metrics.models import MetricsSet


class CollectorError(Exception):
    """Raised by collect_metrics when a collector cannot produce its metrics

    Built-in collectors degrade to placeholder values instead. Collectors
    plugged into SyncTelemetry raise this to abort the collection; the
    aggregator logs it and propagates it to the caller.
    """


class BaseCollector(ABC):
    """Base class for all telemetry collectors"""

    def __init__(self, name: str, short_name: str,
                 logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._name = name
        self._short_name = short_name
        self.logger = (logger or get_logger(__name__)).bind(collector=name)

    @abstractmethod
    def collect_metrics(self) -> MetricsSet:
        """Collect metrics and return them as one ordered MetricsSet

        Raises CollectorError when the metrics cannot be produced.
        """
        pass

    def is_dynamic_metrics(self) -> bool:
        """Whether a new collection could differ from the previous one"""
        return False

    @property
    def name(self) -> str:
        return self._name

    @property
    def short_name(self) -> str:
        return self._short_name

    def new_metrics_set(self) -> MetricsSet:
        """Empty MetricsSet labelled with this collector's names"""
        return MetricsSet(collector=self._name, short_name=self._short_name)
