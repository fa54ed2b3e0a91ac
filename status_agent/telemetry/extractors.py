"""
Host Status Agent - Metric Extractors

Pure parsers that turn command/pseudo-file text into status records.

Parsing is tolerant: a missing or malformed token leaves that single field at
its zero value and logs a warning. Nothing in this module raises for content
problems; failing to obtain the text at all is the collectors' concern.
"""

import re
from typing import List, Tuple

import structlog

from .models import DiskStatus, DockerContainerStatus, KernelStatus, MemoryStatus, NvmeStatus

logger = structlog.get_logger(__name__)

GIB = 1024 ** 3

# mpstat columns (24h clock): time CPU %usr %nice %sys %iowait %irq %soft %steal %guest %gnice %idle
CPU_USER_INDEX = 2
CPU_SYSTEM_INDEX = 4
CPU_IDLE_INDEX = 11
CPU_AGGREGATE_TOKEN = "all"

THROTTLED_LABEL = "throttled="

NVME_KEYS = ("temperature", "percentage_used", "critical_warning")
NVME_TEMP_PATTERN = re.compile(r"^\s*temperature\s*:\s*([\d.]+)")
NVME_PERCENTAGE_PATTERN = re.compile(r"^\s*percentage_used\s*:\s*([\d.]+)%?")
NVME_WARNING_PATTERN = re.compile(r"^\s*critical_warning\s*:\s*(0[xX][0-9a-fA-F]+|\d+)")

MEMINFO_FIELDS = {
    "MemTotal:": "total",
    "MemAvailable:": "available",
    "SwapTotal:": "swap_total",
    "SwapFree:": "swap_free",
}

DOCKER_PS_FORMAT = "{{.Names}}|{{.ID}}|{{.Image}}|{{.Status}}|{{.RunningFor}}"
DOCKER_FIELD_COUNT = 5


# =============================================================================
# CPU
# =============================================================================

def parse_cpu_sample(
    text: str,
    user_index: int = CPU_USER_INDEX,
    system_index: int = CPU_SYSTEM_INDEX,
    idle_index: int = CPU_IDLE_INDEX,
) -> Tuple[float, float, float]:
    """
    Read user/system/idle percentages from the sampler's aggregate row.

    The aggregate row is the last line carrying the "all" token with enough
    columns; mpstat prints the interval row followed by "Average:", which
    carry the same values for a single sample.

    Returns:
        (user_percent, system_percent, idle_percent), zeros on a miss.
    """
    user = system = idle = 0.0
    found = False

    for line in text.splitlines():
        parts = line.split()
        if CPU_AGGREGATE_TOKEN not in parts or len(parts) <= max(user_index, system_index, idle_index):
            continue
        found = True
        try:
            user = float(parts[user_index])
            system = float(parts[system_index])
            idle = float(parts[idle_index])
        except ValueError:
            logger.warning("Unparseable CPU aggregate row", line=line.strip())

    if not found:
        logger.warning("No CPU aggregate row in sampler output")

    return user, system, idle


def parse_millidegrees(text: str) -> float:
    """Thermal zone reading in millidegrees Celsius -> degrees Celsius."""
    value = text.strip()
    try:
        return float(value) / 1000
    except ValueError:
        logger.warning("Unparseable thermal reading", value=value)
        return 0.0


def parse_throttled(text: str) -> bool:
    """
    Decode throttling-status output such as "throttled=0x50005".

    Leading/trailing whitespace and an optional "throttled=" label are removed
    and the rest is read as hexadecimal (int(..., 16), so a "0x" prefix is
    optional). Any non-zero flag word counts as throttled. Unparseable output
    is a parse-miss and reads as not throttled.
    """
    value = text.strip()
    if value.startswith(THROTTLED_LABEL):
        value = value[len(THROTTLED_LABEL):].strip()
    try:
        flags = int(value, 16)
    except ValueError:
        logger.warning("Unparseable throttle flags", value=value)
        return False
    return flags != 0


# =============================================================================
# NVMe
# =============================================================================

def _parse_warning_bits(value: str) -> int:
    if value[:2].lower() == "0x":
        return int(value, 16)
    return int(value)


def parse_nvme_smart_log(text: str) -> NvmeStatus:
    """Extract temperature, wear and critical warning bits from smart-log output."""
    temperature = 0.0
    percentage_used = 0.0
    critical_warning = 0

    for line in text.splitlines():
        if not any(key in line for key in NVME_KEYS):
            continue

        match = NVME_PERCENTAGE_PATTERN.match(line)
        if match:
            try:
                percentage_used = float(match.group(1))
            except ValueError:
                logger.warning("Unparseable NVMe percentage_used", value=match.group(1))

        match = NVME_WARNING_PATTERN.match(line)
        if match:
            try:
                critical_warning = _parse_warning_bits(match.group(1))
            except ValueError:
                logger.warning("Unparseable NVMe critical_warning", value=match.group(1))

        match = NVME_TEMP_PATTERN.match(line)
        if match:
            try:
                temperature = float(match.group(1))
            except ValueError:
                logger.warning("Unparseable NVMe temperature", value=match.group(1))

    return NvmeStatus(
        temperature_c=temperature,
        percentage_used=percentage_used,
        critical_warning_bits=critical_warning,
    )


# =============================================================================
# Memory
# =============================================================================

def parse_meminfo(text: str) -> MemoryStatus:
    """
    Build MemoryStatus from /proc/meminfo text.

    Values are kB in the source and converted to MiB per field with integer
    division; used is total minus available after conversion.
    """
    values = {name: 0 for name in MEMINFO_FIELDS.values()}

    for line in text.splitlines():
        for prefix, name in MEMINFO_FIELDS.items():
            if not line.startswith(prefix):
                continue
            parts = line.split()
            try:
                values[name] = int(parts[1]) // 1024
            except (IndexError, ValueError):
                logger.warning("Unparseable meminfo line", line=line.strip())
            break

    return MemoryStatus(
        total_mb=values["total"],
        used_mb=values["total"] - values["available"],
        swap_total_mb=values["swap_total"],
        swap_free_mb=values["swap_free"],
    )


# =============================================================================
# Disk
# =============================================================================

def disk_status(mount_path: str, total_bytes: int, free_bytes: int) -> DiskStatus:
    """
    Build DiskStatus from raw capacity.

    free_bytes is the space available to unprivileged users, so blocks
    reserved for root count as used. used_percent is truncated, not rounded.
    """
    used_bytes = total_bytes - free_bytes
    used_percent = (used_bytes * 100) // total_bytes if total_bytes > 0 else 0
    return DiskStatus(
        mount_path=mount_path,
        total_gb=total_bytes / GIB,
        used_gb=used_bytes / GIB,
        used_percent=int(used_percent),
    )


# =============================================================================
# Kernel
# =============================================================================

def kernel_status(ostype: str, osrelease: str, arch: str, hostname: str) -> KernelStatus:
    return KernelStatus(
        os_label=f"{ostype.strip()} {osrelease.strip()}",
        architecture=arch.strip(),
        hostname=hostname.strip(),
    )


# =============================================================================
# Docker
# =============================================================================

def parse_docker_ps(text: str) -> List[DockerContainerStatus]:
    """Map `docker ps --format DOCKER_PS_FORMAT` lines to records, dropping malformed ones."""
    containers = []

    for line in text.splitlines():
        if not line.strip():
            continue

        parts = line.split("|")
        if len(parts) != DOCKER_FIELD_COUNT:
            logger.debug("Dropping malformed docker ps line", line=line, fields=len(parts))
            continue

        name, container_id, image, status, running_for = parts
        containers.append(DockerContainerStatus(
            name=name,
            id=container_id,
            image=image,
            status=status,
            running_for=running_for,
        ))

    return containers
