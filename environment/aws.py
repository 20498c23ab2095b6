"""AWS environment detection: EC2, ECS, Lambda and EKS"""
import json
from typing import Dict, Optional, Tuple
import httpx
from .base import CloudEnvDetectorBase
from .context import EnvContext

TOKEN_PATH = "latest/api/token"
TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"
INSTANCE_ID_PATH = "latest/meta-data/instance-id"
REGION_PATH = "latest/meta-data/placement/region"
IDENTITY_DOCUMENT_PATH = "latest/dynamic/instance-identity/document"

REGION_ENV_VARS = ("AWS_REGION", "AWS_DEFAULT_REGION")
ACCOUNT_ENV_VARS = ("AWS_ACCOUNT_ID", "CDK_DEFAULT_ACCOUNT")


class AWSCloudEnvDetector(CloudEnvDetectorBase):
    """Detect AWS compute environments in EC2, ECS, Lambda, EKS order"""

    provider = "aws"
    default_timeout = 0.15
    kubernetes_env_markers = ("AWS_ROLE_ARN", "AWS_WEB_IDENTITY_TOKEN_FILE")
    kubernetes_file_markers = (
        "/etc/eks/release",
        "/etc/eks/containerd/containerd-config.toml",
        "/var/lib/amazon",
    )

    def detect(self) -> Tuple[EnvContext, bool]:
        ec2 = self._detect_ec2()
        if ec2:
            return ec2, True
        if self.getenv("ECS_CONTAINER_METADATA_URI_V4"):
            return self._fallback_context("ecs"), True
        if self.getenv("AWS_LAMBDA_FUNCTION_NAME"):
            return self._fallback_context("lambda"), True
        if self.is_managed_kubernetes():
            return self._fallback_context("k8s"), True
        return EnvContext(), False

    def _detect_ec2(self) -> Optional[EnvContext]:
        """EC2 matches when any of the instance metadata reads succeeds"""
        instance_id = self.get_imds(INSTANCE_ID_PATH)
        region = self.get_imds(REGION_PATH)
        document = self.get_imds(IDENTITY_DOCUMENT_PATH)

        if instance_id is None and region is None and document is None:
            return None

        account_id = self.fallback_account_id()
        if document is not None:
            document_account = self._account_from_document(document)
            if document_account:
                account_id = document_account

        return self.context("ec2", region or "", account_id, instance_id or "")

    def _account_from_document(self, document: str) -> Optional[str]:
        try:
            parsed = json.loads(document)
        except ValueError:
            self.logger.debug("Instance identity document is not valid JSON")
            return None
        if not isinstance(parsed, dict):
            return None
        account_id = parsed.get("accountId")
        return account_id if isinstance(account_id, str) else None

    def get_imds(self, path: str) -> Optional[str]:
        """Read an IMDS path, using an IMDSv2 session token when one is granted"""
        token_response = self.request("PUT", TOKEN_PATH, headers={TOKEN_TTL_HEADER: "60"})
        if token_response is None:
            return None

        headers: Dict[str, str] = {}
        if token_response.status_code == httpx.codes.OK:
            headers[TOKEN_HEADER] = token_response.text
        return self.get_metadata(path, headers=headers)

    def probe_metadata_service(self) -> bool:
        return self.get_imds(INSTANCE_ID_PATH) is not None

    def fallback_region(self) -> str:
        return self.first_env(REGION_ENV_VARS)

    def fallback_account_id(self) -> str:
        return self.first_env(ACCOUNT_ENV_VARS)

    def _fallback_context(self, environment: str) -> EnvContext:
        return self.context(environment, self.fallback_region(), self.fallback_account_id())
