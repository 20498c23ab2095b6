"""Encoders turning collected metrics into transport-ready bytes"""
import base64
import dataclasses
import json
import math
import numbers
from abc import ABC, abstractmethod
from typing import Any, List
from pydantic import BaseModel
from config import DEFAULT_TOOL_NAME
from .models import MetricsSet


class MetricsEncodingError(Exception):
    """Raised when metrics cannot be encoded"""


class MetricsEncoder(ABC):
    """Interface for metrics encoders"""

    @abstractmethod
    def encode_metrics(self, metrics: List[MetricsSet]) -> bytes:
        pass


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = repr(value)
    if text.endswith(".0"):
        return text[:-2]
    return text


def metric_value_to_string(value: Any) -> str:
    """Render a metric value the way it appears on the wire

    None is empty, booleans are lowercase, numbers are plain decimals,
    strings are passed through untouched and anything else is compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        return _format_float(float(value))
    try:
        return json.dumps(value, separators=(",", ":"), sort_keys=True, default=_json_default)
    except (TypeError, ValueError):
        return str(value)


class TelemetryHeaderMetricsEncoder(MetricsEncoder):
    """Encode metrics for the telemetry request header

    The payload is base64("sn=<tool>&<collector>.<metric>=<value>&..."),
    keeping collector order and then each collector's metric order.
    """

    def __init__(self, tool_name: str = DEFAULT_TOOL_NAME):
        self.tool_name = tool_name

    def encode_metrics(self, metrics: List[MetricsSet]) -> bytes:
        parts = [f"sn={self.tool_name}"]
        for metric_group in metrics:
            for metric in metric_group.metrics:
                parts.append(
                    f"{metric_group.short_name}.{metric.short_name}={metric_value_to_string(metric.value)}"
                )
        try:
            payload = "&".join(parts).encode("utf-8")
        except UnicodeEncodeError as e:
            raise MetricsEncodingError(f"Metrics payload is not valid UTF-8: {e}") from e
        return base64.b64encode(payload)
