"""Telemetry aggregation: collect metrics from collectors, cache and encode them"""
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import structlog
from collectors.base import BaseCollector
from collectors.environment import EnvironmentMetricsCollector
from collectors.metadata import MetadataMetricsCollector, METADATA_METRICS_COLLECTOR_NAME
from collectors.system import OSMetricsCollector
from config import Config, DEFAULT_TELEMETRY_HEADER
from logging_config import get_logger, log_error
from .encoders import MetricsEncoder, TelemetryHeaderMetricsEncoder
from .models import MetricsSet


class Telemetry(ABC):
    """Interface for telemetry producers attached to outbound requests"""

    @abstractmethod
    def collect_and_encode_metrics(self) -> bytes:
        pass

    @abstractmethod
    def collector_by_name(self, name: str) -> Optional[BaseCollector]:
        pass


class SyncTelemetry(Telemetry):
    """Synchronous, thread-safe telemetry aggregator

    Encoded bytes from the previous call are returned untouched while every
    collector is static. Otherwise static collectors reuse their last
    MetricsSet and only dynamic (or never collected) ones are collected again.
    """

    def __init__(self, collectors: List[BaseCollector], encoder: MetricsEncoder,
                 logger: Optional[structlog.stdlib.BoundLogger] = None):
        self.collectors = list(collectors)
        self.encoder = encoder
        self.logger = logger or get_logger(__name__)
        self._last_collected_metrics: Dict[str, MetricsSet] = {}
        self._last_collected_encoded: Optional[bytes] = None
        self._lock = threading.Lock()

    def _is_static_collection(self) -> bool:
        return not any(collector.is_dynamic_metrics() for collector in self.collectors)

    def collect_and_encode_metrics(self) -> bytes:
        """Collect from every collector and encode the result

        Raises whatever a collector or the encoder raised; the previously
        encoded value stays cached in that case.
        """
        cached = self._last_collected_encoded
        if cached is not None and self._is_static_collection():
            return cached

        with self._lock:
            all_metrics = []
            for collector in self.collectors:
                if not collector.is_dynamic_metrics():
                    previous = self._last_collected_metrics.get(collector.name)
                    if previous is not None:
                        all_metrics.append(previous)
                        continue

                try:
                    metrics = collector.collect_metrics()
                except Exception as e:
                    log_error(self.logger, e, {"collector": collector.name})
                    raise
                self._last_collected_metrics[collector.name] = metrics
                all_metrics.append(metrics)

            try:
                encoded = self.encoder.encode_metrics(all_metrics)
            except Exception as e:
                log_error(self.logger, e, {"encoder": type(self.encoder).__name__})
                raise

            self._last_collected_encoded = encoded
            self.logger.debug(
                "Telemetry collected",
                collectors=[m.collector for m in all_metrics],
                metrics_count=sum(len(m.metrics) for m in all_metrics),
                event_type="telemetry_collection"
            )
            return encoded

    def collector_by_name(self, name: str) -> Optional[BaseCollector]:
        for collector in self.collectors:
            if collector.name == name:
                return collector
        return None


def default_sync_telemetry(config: Optional[Config] = None,
                           logger: Optional[structlog.stdlib.BoundLogger] = None) -> SyncTelemetry:
    """Telemetry with environment, metadata and OS collectors"""
    config = config or Config()
    return SyncTelemetry(
        [
            EnvironmentMetricsCollector(logger=logger),
            MetadataMetricsCollector(config, logger=logger),
            OSMetricsCollector(logger=logger),
        ],
        TelemetryHeaderMetricsEncoder(config.tool_name),
        logger=logger,
    )


def limited_sync_telemetry(config: Optional[Config] = None,
                           logger: Optional[structlog.stdlib.BoundLogger] = None) -> SyncTelemetry:
    """Telemetry with the metadata collector only"""
    config = config or Config()
    return SyncTelemetry(
        [MetadataMetricsCollector(config, logger=logger)],
        TelemetryHeaderMetricsEncoder(config.tool_name),
        logger=logger,
    )


def create_telemetry(config: Optional[Config] = None, enable_telemetry: bool = True,
                     logger: Optional[structlog.stdlib.BoundLogger] = None) -> SyncTelemetry:
    """Pick full or metadata-only telemetry depending on the caller and configuration"""
    config = config or Config()
    if enable_telemetry and config.is_telemetry_collection_enabled():
        return default_sync_telemetry(config, logger)
    return limited_sync_telemetry(config, logger)


def fill_metadata_telemetry(telemetry: Telemetry, route: str, service: str,
                            class_name: Optional[str] = None, operation: Optional[str] = None) -> None:
    """Record which call is being made on the metadata collector, if there is one"""
    collector = telemetry.collector_by_name(METADATA_METRICS_COLLECTOR_NAME)
    if not isinstance(collector, MetadataMetricsCollector):
        return
    collector.set_route(route)
    collector.set_service(service)
    if class_name is not None:
        collector.set_class(class_name)
    if operation is not None:
        collector.set_operation(operation)


def telemetry_headers(telemetry: Optional[Telemetry], header_name: str = DEFAULT_TELEMETRY_HEADER,
                      logger: Optional[structlog.stdlib.BoundLogger] = None) -> Dict[str, str]:
    """Headers to attach to an outbound request; empty when telemetry is unavailable"""
    if telemetry is None:
        return {}
    try:
        encoded = telemetry.collect_and_encode_metrics()
    except Exception as e:
        (logger or get_logger(__name__)).debug("Failed to collect telemetry", error=str(e))
        return {}
    if not encoded:
        return {}
    return {header_name: encoded.decode("ascii")}
