"""Runtime environment collector"""
import os
from typing import Optional
import structlog
from environment.context import EnvContext, EnvDetector
from environment.detection import CloudEnvDetector
from metrics.models import MetricsSet
from .base import BaseCollector

ENVIRONMENT_METRICS_COLLECTOR_NAME = "environment_metrics"

PROXY_ENV_VARS = ("HTTP_PROXY", "HTTPS_PROXY", "http_proxy", "https_proxy")


class EnvironmentMetricsCollector(BaseCollector):
    """Report proxy usage and the detected cloud provider, environment and region

    Account and instance identifiers are never reported. Detection runs once
    per collector instance and the result is reused afterwards.
    """

    def __init__(self, detector: Optional[EnvDetector] = None,
                 logger: Optional[structlog.stdlib.BoundLogger] = None):
        super().__init__(ENVIRONMENT_METRICS_COLLECTOR_NAME, "em", logger)
        self._detector = detector or CloudEnvDetector(logger=logger)
        self._detected_context: Optional[EnvContext] = None

    def collect_metrics(self) -> MetricsSet:
        metrics = self.new_metrics_set()

        has_proxy = any(os.environ.get(var) for var in PROXY_ENV_VARS)
        metrics.add("proxy_configured", "pc", has_proxy)

        context = self.detected_context
        metrics.add("provider", "prv", context.provider)
        metrics.add("environment", "env", context.environment)
        metrics.add("region", "reg", context.region)

        return metrics

    @property
    def detected_context(self) -> EnvContext:
        """Cloud context, detected on first access"""
        if self._detected_context is None:
            self._detected_context, _ = self._detector.detect()
        return self._detected_context
