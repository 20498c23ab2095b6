"""Runtime environment context produced by cloud detection"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

UNKNOWN = "unknown"
ON_PREMISE = "on-premise"


@dataclass(frozen=True)
class EnvContext:
    """Where the tool is running: provider, compute environment, region and identity"""
    provider: str = ""
    environment: str = ""
    region: str = ""
    account_id: str = ""
    instance_id: str = ""


ON_PREMISE_CONTEXT = EnvContext(
    provider=ON_PREMISE,
    environment=ON_PREMISE,
    region=UNKNOWN,
    account_id=UNKNOWN,
    instance_id=UNKNOWN,
)


class EnvDetector(ABC):
    """Interface for anything able to detect the runtime environment"""

    @abstractmethod
    def detect(self) -> Tuple[EnvContext, bool]:
        """Return the detected context and whether a match was found"""
        pass
