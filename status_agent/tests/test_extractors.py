"""
Host Status Agent - Extractor Tests

Parsers are pure, so these run against captured output only.
"""

import pytest

from status_agent.telemetry.extractors import (
    disk_status,
    kernel_status,
    parse_cpu_sample,
    parse_docker_ps,
    parse_meminfo,
    parse_millidegrees,
    parse_nvme_smart_log,
    parse_throttled,
)
from status_agent.telemetry.models import DockerContainerStatus, NvmeStatus

from samples import DOCKER_PS, MEMINFO, MPSTAT_OUTPUT, NVME_SMART_LOG


class TestCpuSample:
    """Test mpstat aggregate row parsing."""

    def test_reads_fixed_columns(self):
        user, system, idle = parse_cpu_sample(MPSTAT_OUTPUT)

        assert user == 3.27
        assert system == 1.51
        assert idle == 94.72

    def test_values_need_not_sum_to_100(self):
        """iowait, irq and soft are not part of the three reported columns."""
        user, system, idle = parse_cpu_sample(MPSTAT_OUTPUT)
        assert user + system + idle != 100.0

    def test_last_aggregate_row_wins(self):
        text = (
            "14:02:12     all    1.00    0.00    2.00    0.00    0.00    0.00    0.00    0.00    0.00   97.00\n"
            "Average:     all    5.00    0.00    6.00    0.00    0.00    0.00    0.00    0.00    0.00   89.00\n"
        )
        assert parse_cpu_sample(text) == (5.0, 6.0, 89.0)

    def test_per_core_rows_ignored(self):
        text = (
            "14:02:12     0    50.00    0.00   10.00    0.00    0.00    0.00    0.00    0.00    0.00   40.00\n"
            "14:02:12     all  12.50    0.00    2.50    0.00    0.00    0.00    0.00    0.00    0.00   85.00\n"
            "14:02:12     1     0.00    0.00    0.00    0.00    0.00    0.00    0.00    0.00    0.00  100.00\n"
        )
        assert parse_cpu_sample(text) == (12.5, 2.5, 85.0)

    def test_hostname_containing_all_is_not_aggregate(self):
        text = "Linux 6.6.31 (smallbox) \t10/19/2026 \t_aarch64_\t(4 CPU)\n"
        assert parse_cpu_sample(text) == (0.0, 0.0, 0.0)

    def test_missing_aggregate_row(self):
        assert parse_cpu_sample("") == (0.0, 0.0, 0.0)

    def test_short_aggregate_row(self):
        assert parse_cpu_sample("Average: all 1.0 2.0\n") == (0.0, 0.0, 0.0)

    def test_non_numeric_columns(self):
        text = "14:02:12 all x 0.00 y 0.00 0.00 0.00 0.00 0.00 0.00 z\n"
        assert parse_cpu_sample(text) == (0.0, 0.0, 0.0)

    def test_custom_column_positions(self):
        """12h clocks add an AM/PM column; positions are configurable."""
        text = "02:02:12 PM  all    3.27    0.00    1.51    0.25    0.00    0.25    0.00    0.00    0.00   94.72\n"
        assert parse_cpu_sample(text, user_index=3, system_index=5, idle_index=12) == (3.27, 1.51, 94.72)


class TestMillidegrees:
    """Test thermal zone parsing."""

    def test_divides_by_1000(self):
        assert parse_millidegrees("48312\n") == 48.312

    def test_garbage_is_zero(self):
        assert parse_millidegrees("n/a\n") == 0.0


class TestThrottled:
    """Test throttle flag decoding."""

    @pytest.mark.parametrize("text, expected", [
        ("throttled=0x0", False),
        ("throttled=0x0\n", False),
        ("throttled=0x50005", True),
        ("throttled=0x50000\n", True),
        ("0x4", True),
        ("0x0", False),
        ("throttled=ZZ", False),
        ("throttled=", False),
        ("", False),
    ])
    def test_decoding(self, text, expected):
        assert parse_throttled(text) is expected

    def test_hex_not_decimal(self):
        """A bare "10" is read as hex sixteen; there is no decimal fallback."""
        assert parse_throttled("throttled=10") is True
        assert parse_throttled("throttled=0x00000") is False


class TestNvmeSmartLog:
    """Test nvme smart-log parsing."""

    def test_reference_block(self):
        text = (
            "temperature                     : 42 C\n"
            "percentage_used                  : 7%\n"
            "critical_warning                 : 0\n"
        )
        assert parse_nvme_smart_log(text) == NvmeStatus(
            temperature_c=42.0,
            percentage_used=7.0,
            critical_warning_bits=0,
        )

    def test_full_smart_log(self):
        """Sensor and time lines with capitalised keys are not mistaken for temperature."""
        status = parse_nvme_smart_log(NVME_SMART_LOG)

        assert status.temperature_c == 42.0
        assert status.percentage_used == 7.0
        assert status.critical_warning_bits == 0

    def test_missing_percentage_line(self):
        text = (
            "temperature                     : 42 C\n"
            "critical_warning                 : 0\n"
        )
        status = parse_nvme_smart_log(text)

        assert status.percentage_used == 0.0
        assert status.temperature_c == 42.0

    def test_wear_can_exceed_100(self):
        assert parse_nvme_smart_log("percentage_used : 112%\n").percentage_used == 112.0

    def test_critical_warning_bits(self):
        assert parse_nvme_smart_log("critical_warning : 5\n").critical_warning_bits == 5
        assert parse_nvme_smart_log("critical_warning : 0x04\n").critical_warning_bits == 4

    def test_malformed_number_is_swallowed(self):
        text = (
            "temperature                     : 4.2.1 C\n"
            "percentage_used                  : 7%\n"
        )
        status = parse_nvme_smart_log(text)

        assert status.temperature_c == 0.0
        assert status.percentage_used == 7.0

    def test_empty_output(self):
        assert parse_nvme_smart_log("") == NvmeStatus()


class TestMeminfo:
    """Test /proc/meminfo parsing."""

    def test_converts_kib_to_mib(self):
        status = parse_meminfo(MEMINFO)

        assert status.total_mb == 7864
        assert status.used_mb == 7864 - 6389
        assert status.swap_total_mb == 511
        assert status.swap_free_mb == 255

    @pytest.mark.parametrize("total_kb, available_kb", [
        (8052892, 6543210),
        (1024, 1024),
        (1023, 0),
        (4096, 1),
        (3990176, 2146304),
    ])
    def test_used_is_total_minus_available(self, total_kb, available_kb):
        text = f"MemTotal: {total_kb} kB\nMemAvailable: {available_kb} kB\n"
        status = parse_meminfo(text)

        assert status.used_mb == total_kb // 1024 - available_kb // 1024
        assert status.used_mb >= 0

    def test_missing_lines_are_zero(self):
        status = parse_meminfo("MemTotal: 2048 kB\n")

        assert status.total_mb == 2
        assert status.used_mb == 2
        assert status.swap_total_mb == 0
        assert status.swap_free_mb == 0

    def test_non_numeric_value(self):
        status = parse_meminfo("MemTotal: lots kB\nSwapTotal: 2048 kB\n")

        assert status.total_mb == 0
        assert status.swap_total_mb == 2

    def test_prefix_must_start_line(self):
        status = parse_meminfo("HugeMemTotal: 4096 kB\n")
        assert status.total_mb == 0


class TestDiskStatus:
    """Test disk capacity conversion."""

    def test_gib_conversion(self):
        gib = 1024 ** 3
        status = disk_status("/srv", total_bytes=100 * gib, free_bytes=25 * gib)

        assert status.mount_path == "/srv"
        assert status.total_gb == 100.0
        assert status.used_gb == 75.0
        assert status.used_percent == 75

    def test_percent_is_truncated(self):
        assert disk_status("/", total_bytes=3, free_bytes=1).used_percent == 66
        assert disk_status("/", total_bytes=1000, free_bytes=1).used_percent == 99

    def test_zero_capacity(self):
        assert disk_status("/proc", total_bytes=0, free_bytes=0).used_percent == 0


class TestKernelStatus:
    """Test kernel identity assembly."""

    def test_os_label(self):
        status = kernel_status("Linux\n", "6.6.31+rpt-rpi-2712\n", "aarch64\n", "raspberrypi\n")

        assert status.os_label == "Linux 6.6.31+rpt-rpi-2712"
        assert status.architecture == "aarch64"
        assert status.hostname == "raspberrypi"


class TestDockerPs:
    """Test docker ps line parsing."""

    def test_well_formed_lines(self):
        containers = parse_docker_ps(DOCKER_PS)

        assert len(containers) == 2
        assert containers[0] == DockerContainerStatus(
            name="homeassistant",
            id="3f2a1b9c8d7e",
            image="ghcr.io/home-assistant/home-assistant:stable",
            status="Up 3 days",
            running_for="3 days ago",
        )

    def test_short_line_dropped(self):
        assert parse_docker_ps("nginx|abc123|nginx:latest\n") == []

    def test_extra_fields_dropped(self):
        assert parse_docker_ps("a|b|c|d|e|f\n") == []

    def test_blank_lines_ignored(self):
        text = "\n   \nweb|0123456789ab|nginx:1.25|Up 2 hours|2 hours ago\n\n"
        containers = parse_docker_ps(text)

        assert [c.name for c in containers] == ["web"]

    def test_mixed_input(self):
        text = (
            "web|0123456789ab|nginx:1.25|Up 2 hours|2 hours ago\n"
            "broken|line|only\n"
            "\n"
            "db|ba9876543210|postgres:16|Up 5 minutes|5 minutes ago\n"
        )
        assert [c.name for c in parse_docker_ps(text)] == ["web", "db"]
