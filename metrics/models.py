"""Metric models shared by collectors and encoders"""
from dataclasses import dataclass, field
from typing import Any, List


@dataclass
class Metric:
    """Single named value with its wire short name"""
    name: str
    short_name: str
    value: Any = None


@dataclass
class MetricsSet:
    """Ordered metrics produced by one collector in one collection pass"""
    collector: str
    short_name: str
    metrics: List[Metric] = field(default_factory=list)

    def __post_init__(self):
        # Ensure metrics is never None
        if self.metrics is None:
            self.metrics = []

    def add(self, name: str, short_name: str, value: Any) -> None:
        self.metrics.append(Metric(name=name, short_name=short_name, value=value))
