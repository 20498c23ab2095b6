"""Shared probing helpers for cloud provider detectors"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional
import httpx
import structlog
from logging_config import get_logger
from .context import EnvContext, EnvDetector, UNKNOWN

DEFAULT_METADATA_HOST = "169.254.169.254"
KUBERNETES_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"


def concat_env(prefix: str, name: str) -> str:
    """Join an env var namespace and a variable name with a single underscore"""
    if not prefix:
        return name
    if not name:
        return prefix
    if prefix.endswith("_"):
        return f"{prefix}{name}"
    return f"{prefix}_{name}"


def path_exists(path: str) -> bool:
    """Check a filesystem marker, treating unreadable paths as absent"""
    try:
        return Path(path).exists()
    except OSError:
        return False


@dataclass
class DetectorOptions:
    """Overrides for where a detector looks for its signals

    metadata_host replaces the link-local metadata address, env_prefix
    namespaces every environment variable lookup, timeout replaces the
    provider's request timeout and transport lets callers plug in an
    httpx transport (for instance httpx.MockTransport).
    """
    metadata_host: str = DEFAULT_METADATA_HOST
    env_prefix: str = ""
    timeout: Optional[float] = None
    transport: Optional[httpx.BaseTransport] = None


class CloudEnvDetectorBase(EnvDetector):
    """Base class for provider detectors built on env vars, files and a metadata service"""

    provider = ""
    default_timeout = 0.2
    kubernetes_env_markers: tuple = ()
    kubernetes_file_markers: tuple = ()

    def __init__(self, options: Optional[DetectorOptions] = None,
                 logger: Optional[structlog.stdlib.BoundLogger] = None):
        self.options = options or DetectorOptions()
        self.logger = (logger or get_logger(__name__)).bind(provider=self.provider)
        self._client: Optional[httpx.Client] = None

    @property
    def timeout(self) -> float:
        if self.options.timeout is not None:
            return self.options.timeout
        return self.default_timeout

    @property
    def client(self) -> httpx.Client:
        """HTTP client for metadata calls, created on first use"""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                transport=self.options.transport,
                trust_env=False,
            )
        return self._client

    def close(self) -> None:
        """Release the metadata HTTP client"""
        if self._client is not None:
            self._client.close()
            self._client = None

    def getenv(self, name: str) -> str:
        """Read a namespaced environment variable, empty when unset"""
        return os.environ.get(concat_env(self.options.env_prefix, name), "")

    def first_env(self, names: Iterable[str], default: str = UNKNOWN) -> str:
        """Return the first non-empty variable of an ordered fallback chain"""
        for name in names:
            value = self.getenv(name)
            if value:
                return value
        return default

    def any_env(self, names: Iterable[str]) -> bool:
        return any(self.getenv(name) for name in names)

    def any_path(self, paths: Iterable[str]) -> bool:
        return any(path_exists(path) for path in paths)

    def is_kubernetes(self) -> bool:
        """Check the generic Kubernetes indicators shared by every provider"""
        if self.getenv("KUBERNETES_SERVICE_HOST"):
            return True
        return path_exists(KUBERNETES_TOKEN_PATH)

    def is_managed_kubernetes(self) -> bool:
        """Kubernetes combined with at least one provider specific marker"""
        if not self.is_kubernetes():
            return False
        if self.any_env(self.kubernetes_env_markers):
            return True
        if self.any_path(self.kubernetes_file_markers):
            return True
        return self.probe_metadata_service()

    def probe_metadata_service(self) -> bool:
        """Last resort signal for the managed Kubernetes check"""
        return False

    def metadata_url(self, path: str) -> str:
        return f"http://{self.options.metadata_host}/{path.lstrip('/')}"

    def request(self, method: str, path: str, headers: Optional[Dict[str, str]] = None) -> Optional[httpx.Response]:
        """Send a metadata request, returning None when the service cannot be reached"""
        try:
            return self.client.request(method, self.metadata_url(path), headers=headers)
        except httpx.HTTPError as e:
            self.logger.debug("Metadata request failed", method=method, path=path, error=str(e))
            return None

    def get_metadata(self, path: str, headers: Optional[Dict[str, str]] = None) -> Optional[str]:
        """GET a metadata path, returning the body only on HTTP 200"""
        response = self.request("GET", path, headers=headers)
        if response is None:
            return None
        if response.status_code != httpx.codes.OK:
            self.logger.debug("Metadata request rejected", path=path, status_code=response.status_code)
            return None
        return response.text

    def context(self, environment: str, region: str, account_id: str, instance_id: str = "") -> EnvContext:
        return EnvContext(
            provider=self.provider,
            environment=environment,
            region=region,
            account_id=account_id,
            instance_id=instance_id,
        )
