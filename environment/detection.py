"""Cloud environment detection cascade across AWS, Azure and GCP"""
from typing import List, Optional, Tuple
import structlog
from logging_config import get_logger, log_detection_result
from .aws import AWSCloudEnvDetector
from .azure import AzureCloudEnvDetector
from .base import DetectorOptions
from .context import EnvContext, EnvDetector, ON_PREMISE_CONTEXT
from .gcp import GCPCloudEnvDetector


class CloudEnvDetector(EnvDetector):
    """Try each provider detector in order; the first match wins

    The default order is AWS, Azure, then GCP. When nothing matches the
    on-premise context is returned with found set to False.
    """

    def __init__(self, detectors: Optional[List[EnvDetector]] = None,
                 options: Optional[DetectorOptions] = None,
                 logger: Optional[structlog.stdlib.BoundLogger] = None):
        self.logger = logger or get_logger(__name__)
        if detectors is None:
            detectors = [
                AWSCloudEnvDetector(options, self.logger),
                AzureCloudEnvDetector(options, self.logger),
                GCPCloudEnvDetector(options, self.logger),
            ]
        self.detectors = detectors

    def detect(self) -> Tuple[EnvContext, bool]:
        for detector in self.detectors:
            context, found = detector.detect()
            if found:
                log_detection_result(self.logger, context.provider, context.environment, True)
                return context, True

        self.logger.debug("No cloud environment detected, assuming on-premise")
        return ON_PREMISE_CONTEXT, False

    def close(self) -> None:
        """Close any detector holding network resources"""
        for detector in self.detectors:
            close = getattr(detector, "close", None)
            if close:
                close()
