"""
Host Status Agent - Test fixtures
"""

import os
import stat

import pytest

from status_agent.config import Settings

from samples import MEMINFO


@pytest.fixture
def make_settings():
    """Build Settings from alias-style overrides, ignoring any .env file."""
    def _make(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)
    return _make


@pytest.fixture
def proc_tree(tmp_path):
    """Fake procfs/sysfs files for memory, kernel identity and temperature."""
    kernel = tmp_path / "kernel"
    kernel.mkdir()
    (kernel / "ostype").write_text("Linux\n")
    (kernel / "osrelease").write_text("6.6.31+rpt-rpi-2712\n")
    (kernel / "arch").write_text("aarch64\n")
    (kernel / "hostname").write_text("raspberrypi\n")
    (tmp_path / "meminfo").write_text(MEMINFO)
    (tmp_path / "temp").write_text("48312\n")

    return {
        "MEMINFO_PATH": str(tmp_path / "meminfo"),
        "THERMAL_ZONE_PATH": str(tmp_path / "temp"),
        "OSTYPE_PATH": str(kernel / "ostype"),
        "OSRELEASE_PATH": str(kernel / "osrelease"),
        "ARCH_PATH": str(kernel / "arch"),
        "HOSTNAME_PATH": str(kernel / "hostname"),
    }


@pytest.fixture
def fake_binary(tmp_path):
    """Write an executable shell script that prints fixed output."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(name: str, stdout: str = "", exit_code: int = 0) -> str:
        path = bin_dir / name
        path.write_text(f"#!/bin/sh\ncat <<'EOF'\n{stdout}EOF\nexit {exit_code}\n")
        os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)
    return _make
