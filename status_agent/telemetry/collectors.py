"""
Host Status Agent - Collectors

One collector per subsystem. Each obtains its raw text (pseudo-file or
external command) and hands it to the matching extractor. Failing to obtain
the text raises a CollectorError; gaps inside the text do not.
"""

from typing import Awaitable, Callable, Dict, List

import psutil
import structlog

from status_agent.commands import run_checked
from status_agent.config import Settings
from status_agent.errors import CollectorError

from . import extractors
from .models import CpuStatus, DiskStatus, DockerContainerStatus, KernelStatus, MemoryStatus, NvmeStatus
from .sources import read_text

logger = structlog.get_logger(__name__)

# Keeps the sampler's time column in 24h form so column positions hold
SAMPLER_ENV = {"LC_ALL": "C"}


async def collect_cpu(settings: Settings) -> CpuStatus:
    """
    Sample CPU load, then read temperature and throttling independently.

    Only the load sample is mandatory. Temperature and throttle failures are
    logged and reported as 0.0 / False.
    """
    result = await run_checked(
        [settings.cpu_sampler, str(settings.cpu_sample_seconds), "1"],
        timeout=settings.cpu_sampler_timeout,
        env=SAMPLER_ENV,
    )
    user, system, idle = extractors.parse_cpu_sample(
        result.stdout,
        user_index=settings.cpu_user_index,
        system_index=settings.cpu_system_index,
        idle_index=settings.cpu_idle_index,
    )

    return CpuStatus(
        temperature_c=read_cpu_temperature(settings),
        user_percent=user,
        system_percent=system,
        idle_percent=idle,
        throttled=await read_throttled(settings),
    )


def read_cpu_temperature(settings: Settings) -> float:
    try:
        return extractors.parse_millidegrees(read_text(settings.thermal_zone_path))
    except CollectorError as e:
        logger.warning("CPU temperature unavailable", source=e.source, error=str(e))
        return 0.0


async def read_throttled(settings: Settings) -> bool:
    try:
        result = await run_checked(
            settings.throttle_command_list,
            timeout=settings.command_timeout,
        )
    except CollectorError as e:
        logger.warning("Throttle status unavailable", source=e.source, error=str(e))
        return False
    return extractors.parse_throttled(result.stdout)


async def collect_nvme(settings: Settings) -> NvmeStatus:
    """Read the drive's SMART log (needs passwordless sudo)."""
    result = await run_checked(
        settings.privileged([settings.nvme_binary, "smart-log", settings.nvme_device]),
        timeout=settings.command_timeout,
        source="nvme",
    )
    return extractors.parse_nvme_smart_log(result.stdout)


async def collect_memory(settings: Settings) -> MemoryStatus:
    return extractors.parse_meminfo(read_text(settings.meminfo_path))


async def collect_disks(settings: Settings) -> List[DiskStatus]:
    """Report each configured mount; mounts that cannot be statted are left out."""
    disks = []
    for mount_path in settings.mount_points_list:
        try:
            usage = psutil.disk_usage(mount_path)
        except OSError as e:
            logger.warning("Skipping mount point", mount=mount_path, error=str(e))
            continue
        disks.append(extractors.disk_status(mount_path, usage.total, usage.free))
    return disks


async def collect_kernel(settings: Settings) -> KernelStatus:
    return extractors.kernel_status(
        ostype=read_text(settings.ostype_path),
        osrelease=read_text(settings.osrelease_path),
        arch=read_text(settings.arch_path),
        hostname=read_text(settings.hostname_path),
    )


async def collect_docker(settings: Settings) -> List[DockerContainerStatus]:
    """List running containers (needs passwordless sudo)."""
    result = await run_checked(
        settings.privileged([settings.docker_binary, "ps", "--format", extractors.DOCKER_PS_FORMAT]),
        timeout=settings.command_timeout,
        source="docker",
    )
    return extractors.parse_docker_ps(result.stdout)


Collector = Callable[[Settings], Awaitable]

COLLECTORS: Dict[str, Collector] = {
    "cpu": collect_cpu,
    "nvme": collect_nvme,
    "memory": collect_memory,
    "disks": collect_disks,
    "kernel": collect_kernel,
    "docker": collect_docker,
}
