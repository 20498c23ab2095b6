"""Telemetry metric collectors"""
from .base import BaseCollector, CollectorError
from .environment import EnvironmentMetricsCollector, ENVIRONMENT_METRICS_COLLECTOR_NAME
from .metadata import MetadataMetricsCollector, METADATA_METRICS_COLLECTOR_NAME
from .system import OSMetricsCollector, OS_METRICS_COLLECTOR_NAME

__all__ = [
    'BaseCollector',
    'CollectorError',
    'EnvironmentMetricsCollector',
    'ENVIRONMENT_METRICS_COLLECTOR_NAME',
    'MetadataMetricsCollector',
    'METADATA_METRICS_COLLECTOR_NAME',
    'OSMetricsCollector',
    'OS_METRICS_COLLECTOR_NAME'
]
