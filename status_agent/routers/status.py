"""
Host Status Agent - Status Router

Maps each route to one collector. Collection failures propagate to the
CollectorError handler registered in main.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends

from status_agent.config import Settings, get_settings
from status_agent.telemetry.collectors import (
    collect_cpu,
    collect_disks,
    collect_docker,
    collect_kernel,
    collect_memory,
    collect_nvme,
)
from status_agent.telemetry.snapshot import SnapshotAggregator

router = APIRouter()


@router.get("/status", response_model=Dict)
async def get_status(settings: Settings = Depends(get_settings)):
    """Full snapshot of the configured subsystems."""
    snapshot = await SnapshotAggregator(settings).collect()
    return snapshot.to_dict()


@router.get("/cpu", response_model=Dict)
async def get_cpu(settings: Settings = Depends(get_settings)):
    return (await collect_cpu(settings)).to_dict()


@router.get("/nvme", response_model=Dict)
async def get_nvme(settings: Settings = Depends(get_settings)):
    return (await collect_nvme(settings)).to_dict()


@router.get("/memory", response_model=Dict)
async def get_memory(settings: Settings = Depends(get_settings)):
    return (await collect_memory(settings)).to_dict()


@router.get("/disks", response_model=List[Dict])
async def get_disks(settings: Settings = Depends(get_settings)):
    """Usage per configured mount; unmounted paths are simply absent."""
    return [disk.to_dict() for disk in await collect_disks(settings)]


@router.get("/kernel", response_model=Dict)
async def get_kernel(settings: Settings = Depends(get_settings)):
    return (await collect_kernel(settings)).to_dict()


@router.get("/docker", response_model=List[Dict])
async def get_docker(settings: Settings = Depends(get_settings)):
    """Running containers."""
    return [container.to_dict() for container in await collect_docker(settings)]
