"""
Host Status Agent

Collects CPU, NVMe, memory, disk, kernel and container status from a Linux
host and serves it over a small JSON API.
"""

__version__ = "1.0.0"
