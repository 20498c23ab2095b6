"""Cloud runtime environment detection"""
from .context import EnvContext, EnvDetector, ON_PREMISE_CONTEXT
from .base import DetectorOptions, concat_env
from .aws import AWSCloudEnvDetector
from .azure import AzureCloudEnvDetector
from .gcp import GCPCloudEnvDetector
from .detection import CloudEnvDetector

__all__ = [
    'EnvContext',
    'EnvDetector',
    'ON_PREMISE_CONTEXT',
    'DetectorOptions',
    'concat_env',
    'AWSCloudEnvDetector',
    'AzureCloudEnvDetector',
    'GCPCloudEnvDetector',
    'CloudEnvDetector'
]
