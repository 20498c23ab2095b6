"""GCP environment detection: GCE, Cloud Functions, Cloud Run and GKE"""
from typing import Optional, Tuple
from .base import CloudEnvDetectorBase
from .context import EnvContext

METADATA_HEADERS = {"Metadata-Flavor": "Google"}

REGION_ENV_VARS = ("FUNCTION_REGION", "GOOGLE_CLOUD_REGION", "REGION")
PROJECT_ENV_VARS = ("GOOGLE_CLOUD_PROJECT", "GCLOUD_PROJECT", "PROJECT_ID")


def extract_region_from_zone(zone: str) -> str:
    """Turn 'projects/123/zones/us-central1-a' into 'us-central1'"""
    if not zone:
        return ""
    last = zone.split("/")[-1]
    parts = last.split("-")
    if len(parts) < 2:
        return last
    return f"{parts[0]}-{parts[1]}"


class GCPCloudEnvDetector(CloudEnvDetectorBase):
    """Detect GCP compute environments in GCE, Functions, Cloud Run, GKE order"""

    provider = "gcp"
    default_timeout = 0.2
    kubernetes_env_markers = ("GKE_CLUSTER_NAME", "GOOGLE_APPLICATION_CREDENTIALS", "GCE_METADATA_HOST")
    kubernetes_file_markers = (
        "/var/lib/google",
        "/etc/gke/config",
        "/home/kubernetes",
        "/var/lib/kubelet/kubeconfig",
    )

    def detect(self) -> Tuple[EnvContext, bool]:
        gce = self._detect_gce()
        if gce:
            return gce, True
        if self.any_env(("FUNCTION_NAME", "FUNCTION_TARGET")):
            return self._fallback_context("functions"), True
        if self.getenv("K_SERVICE"):
            return self._fallback_context("cloudrun"), True
        if self.is_managed_kubernetes():
            return self._fallback_context("k8s"), True
        return EnvContext(), False

    def _detect_gce(self) -> Optional[EnvContext]:
        """GCE matches when any of the instance or project reads succeeds"""
        instance_id = self.get_compute_metadata("instance/id")
        zone = self.get_compute_metadata("instance/zone")
        project_id = self.get_compute_metadata("project/project-id")

        if instance_id is None and zone is None and project_id is None:
            return None

        return self.context("gce", extract_region_from_zone(zone or ""), project_id or "", instance_id or "")

    def get_compute_metadata(self, path: str) -> Optional[str]:
        return self.get_metadata(f"computeMetadata/v1/{path}", headers=METADATA_HEADERS)

    def probe_metadata_service(self) -> bool:
        return self.get_compute_metadata("instance/id") is not None

    def fallback_region(self) -> str:
        return self.first_env(REGION_ENV_VARS)

    def fallback_project_id(self) -> str:
        return self.first_env(PROJECT_ENV_VARS)

    def _fallback_context(self, environment: str) -> EnvContext:
        return self.context(environment, self.fallback_region(), self.fallback_project_id())
