"""Azure environment detection: VMs, Functions, App Service and AKS"""
import json
from typing import Optional, Tuple
from .base import CloudEnvDetectorBase
from .context import EnvContext

IMDS_PATH = "metadata/instance?api-version=2021-02-01"

REGION_ENV_VARS = ("AZURE_REGION", "REGION_NAME", "LOCATION")
SUBSCRIPTION_ENV_VARS = ("AZURE_SUBSCRIPTION_ID", "SUBSCRIPTION_ID")


class AzureCloudEnvDetector(CloudEnvDetectorBase):
    """Detect Azure compute environments in VM, Functions, App Service, AKS order"""

    provider = "azure"
    default_timeout = 0.2
    kubernetes_env_markers = ("AKS_CLUSTER_NAME", "AZURE_CONTAINER_INSTANCE_ID")
    kubernetes_file_markers = (
        "/etc/kubernetes/azure.json",
        "/etc/kubernetes/azurekubeletidentity.json",
    )

    def detect(self) -> Tuple[EnvContext, bool]:
        vm = self._detect_imds()
        if vm:
            return vm, True
        if self.getenv("FUNCTIONS_WORKER_RUNTIME"):
            return self._fallback_context("functions"), True
        if self.any_env(("WEBSITE_INSTANCE_ID", "WEBSITE_SITE_NAME")):
            return self._fallback_context("appservice"), True
        if self.is_managed_kubernetes():
            return self._fallback_context("k8s"), True
        return EnvContext(), False

    def _detect_imds(self) -> Optional[EnvContext]:
        """Query the Azure instance metadata service for compute details"""
        body = self.get_metadata(IMDS_PATH, headers={"Metadata": "true"})
        if body is None:
            return None

        try:
            document = json.loads(body)
        except ValueError:
            self.logger.debug("Azure IMDS returned malformed JSON")
            return None
        if not isinstance(document, dict):
            return None

        compute = document.get("compute")
        if compute is None:
            compute = {}
        if not isinstance(compute, dict):
            self.logger.debug("Azure IMDS compute section is not an object")
            return None

        fields = []
        for key in ("location", "subscriptionId", "vmId"):
            value = compute.get(key)
            if value is None:
                value = ""
            if not isinstance(value, str):
                self.logger.debug("Azure IMDS field has an unexpected type", field=key)
                return None
            fields.append(value)

        location, subscription_id, vm_id = fields
        return self.context("vm", location, subscription_id, vm_id)

    def fallback_region(self) -> str:
        return self.first_env(REGION_ENV_VARS)

    def fallback_subscription_id(self) -> str:
        return self.first_env(SUBSCRIPTION_ENV_VARS)

    def _fallback_context(self, environment: str) -> EnvContext:
        return self.context(environment, self.fallback_region(), self.fallback_subscription_id())
