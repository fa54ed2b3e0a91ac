"""
Host Status Agent - Status Records

Immutable values built fresh on every request.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CpuStatus:
    temperature_c: float = 0.0
    user_percent: float = 0.0
    system_percent: float = 0.0
    idle_percent: float = 0.0
    throttled: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class NvmeStatus:
    temperature_c: float = 0.0
    percentage_used: float = 0.0      # lifetime wear, can exceed 100
    critical_warning_bits: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MemoryStatus:
    """Memory in MiB. used_mb is total minus MemAvailable."""
    total_mb: int = 0
    used_mb: int = 0
    swap_total_mb: int = 0
    swap_free_mb: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DiskStatus:
    """Capacity of one mount point in GiB."""
    mount_path: str
    total_gb: float
    used_gb: float
    used_percent: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class KernelStatus:
    os_label: str
    architecture: str
    hostname: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DockerContainerStatus:
    name: str
    id: str
    image: str
    status: str
    running_for: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SystemSnapshot:
    """Full status; fields left as None were not configured for collection."""
    cpu: Optional[CpuStatus] = None
    nvme: Optional[NvmeStatus] = None
    memory: Optional[MemoryStatus] = None
    disks: Optional[List[DiskStatus]] = None
    kernel: Optional[KernelStatus] = None
    docker: Optional[List[DockerContainerStatus]] = None
    collected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving out fields that were not collected."""
        data: Dict[str, Any] = {"collected_at": self.collected_at.isoformat()}
        for name in ("cpu", "nvme", "memory", "kernel"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value.to_dict()
        for name in ("disks", "docker"):
            values = getattr(self, name)
            if values is not None:
                data[name] = [v.to_dict() for v in values]
        return data
