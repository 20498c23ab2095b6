"""Tool metadata collector"""
from datetime import datetime
from typing import Optional
import structlog
from config import Config
from metrics.models import MetricsSet
from .base import BaseCollector

METADATA_METRICS_COLLECTOR_NAME = "metadata_metrics"


class MetadataMetricsCollector(BaseCollector):
    """Collect build information plus the route, service, class and operation of the current call

    The collector is dynamic whenever one of the setters ran since the last
    collection. A new collector starts dynamic since nothing has been
    collected yet.
    """

    def __init__(self, config: Optional[Config] = None,
                 logger: Optional[structlog.stdlib.BoundLogger] = None):
        super().__init__(METADATA_METRICS_COLLECTOR_NAME, "mm", logger)
        self.config = config or Config()
        self._route = ""
        self._service = ""
        self._class = ""
        self._operation = ""
        self._changed_from_last_collection = True

    def collect_metrics(self) -> MetricsSet:
        metrics = self.new_metrics_set()
        config = self.config

        metrics.add("tool", "at", config.tool_name)
        metrics.add("version", "av", config.version)
        metrics.add("build_number", "abn", config.build_number)
        metrics.add("build_date", "abd", config.build_date)
        metrics.add("git_commit", "agc", config.git_commit)
        metrics.add("git_branch", "agb", config.git_branch)
        metrics.add("correlation_id", "cid", config.correlation_id)
        metrics.add("local_time", "lt", datetime.now().astimezone().isoformat(timespec="seconds"))
        metrics.add("route", "rt", self._route)
        metrics.add("service", "svc", self._service)
        metrics.add("class", "cls", self._class)
        metrics.add("operation", "op", self._operation)
        metrics.add("deploy_env", "de", config.deploy_env)

        self._changed_from_last_collection = False
        return metrics

    def is_dynamic_metrics(self) -> bool:
        return self._changed_from_last_collection

    def set_route(self, route: str) -> None:
        self._route = route
        self._changed_from_last_collection = True

    def set_service(self, service: str) -> None:
        self._service = service
        self._changed_from_last_collection = True

    def set_class(self, class_name: str) -> None:
        self._class = class_name
        self._changed_from_last_collection = True

    def set_operation(self, operation: str) -> None:
        self._operation = operation
        self._changed_from_last_collection = True

    @property
    def route(self) -> str:
        return self._route

    @property
    def service(self) -> str:
        return self._service

    @property
    def class_name(self) -> str:
        return self._class

    @property
    def operation(self) -> str:
        return self._operation
