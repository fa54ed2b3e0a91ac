"""
Host Status Agent - Configuration

Loads configuration from environment variables and an optional .env file.
Paths, commands, column positions and timeouts all live here and are handed
to the collectors; nothing else hard-codes them.
"""

import shlex
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings

SNAPSHOT_FIELD_NAMES = ("cpu", "nvme", "memory", "disks", "kernel", "docker")


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API Settings
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8080, alias="API_PORT")
    api_debug: bool = Field(default=False, alias="API_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Rate Limiting
    rate_limit_per_minute: int = Field(default=60, alias="RATE_LIMIT_PER_MINUTE")

    # Snapshot
    snapshot_fields: str = Field(default="cpu,nvme,memory,disks", alias="SNAPSHOT_FIELDS")
    mount_points: str = Field(default="/,/srv", alias="MOUNT_POINTS")

    # Pseudo-files
    thermal_zone_path: str = Field(default="/sys/class/thermal/thermal_zone0/temp", alias="THERMAL_ZONE_PATH")
    meminfo_path: str = Field(default="/proc/meminfo", alias="MEMINFO_PATH")
    ostype_path: str = Field(default="/proc/sys/kernel/ostype", alias="OSTYPE_PATH")
    osrelease_path: str = Field(default="/proc/sys/kernel/osrelease", alias="OSRELEASE_PATH")
    arch_path: str = Field(default="/proc/sys/kernel/arch", alias="ARCH_PATH")
    hostname_path: str = Field(default="/proc/sys/kernel/hostname", alias="HOSTNAME_PATH")

    # CPU sampler (mpstat <interval> <count>)
    cpu_sampler: str = Field(default="mpstat", alias="CPU_SAMPLER")
    cpu_sample_seconds: int = Field(default=1, alias="CPU_SAMPLE_SECONDS")
    cpu_sampler_timeout: float = Field(default=6.0, alias="CPU_SAMPLER_TIMEOUT")
    cpu_user_index: int = Field(default=2, alias="CPU_USER_INDEX")
    cpu_system_index: int = Field(default=4, alias="CPU_SYSTEM_INDEX")
    cpu_idle_index: int = Field(default=11, alias="CPU_IDLE_INDEX")

    # External commands
    throttle_command: str = Field(default="vcgencmd get_throttled", alias="THROTTLE_COMMAND")
    nvme_binary: str = Field(default="/usr/sbin/nvme", alias="NVME_BINARY")
    nvme_device: str = Field(default="/dev/nvme0n1", alias="NVME_DEVICE")
    docker_binary: str = Field(default="docker", alias="DOCKER_BINARY")
    sudo_binary: str = Field(default="sudo", alias="SUDO_BINARY")
    use_sudo: bool = Field(default=True, alias="USE_SUDO")
    command_timeout: float = Field(default=5.0, alias="COMMAND_TIMEOUT")

    @property
    def mount_points_list(self) -> List[str]:
        """Parse mount points from comma-separated string."""
        return _split_list(self.mount_points)

    @property
    def snapshot_fields_list(self) -> List[str]:
        """Parse snapshot fields, rejecting names that have no collector."""
        fields = _split_list(self.snapshot_fields)
        unknown = [f for f in fields if f not in SNAPSHOT_FIELD_NAMES]
        if unknown:
            raise ValueError(f"Unknown snapshot fields: {', '.join(unknown)}")
        return fields

    @property
    def throttle_command_list(self) -> List[str]:
        return shlex.split(self.throttle_command)

    def privileged(self, argv: List[str]) -> List[str]:
        """Prefix argv with non-interactive sudo when enabled."""
        if self.use_sudo:
            return [self.sudo_binary, "-n", *argv]
        return list(argv)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True
        frozen = True
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings
