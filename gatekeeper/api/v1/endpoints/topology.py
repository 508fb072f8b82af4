"""Village, node and device registration API."""

import logging

from fastapi import APIRouter, Depends, Path, status

from gatekeeper.api.deps import get_topology_registry
from gatekeeper.schemas.topology import (
    DeviceCreate,
    DeviceInDB,
    NodeCreate,
    NodeInDB,
    VillageCreate,
    VillageInDB,
)
from gatekeeper.services.topology import TopologyRegistry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/villages", response_model=VillageInDB, status_code=status.HTTP_201_CREATED)
def create_village(
    body: VillageCreate,
    registry: TopologyRegistry = Depends(get_topology_registry),
):
    return registry.create_village(body)


@router.post("/nodes", response_model=NodeInDB, status_code=status.HTTP_201_CREATED)
def create_node(
    body: NodeCreate,
    registry: TopologyRegistry = Depends(get_topology_registry),
):
    return registry.create_node(body)


@router.post("/devices", response_model=DeviceInDB, status_code=status.HTTP_201_CREATED)
def register_device(
    body: DeviceCreate,
    registry: TopologyRegistry = Depends(get_topology_registry),
):
    """Register a capture device. Omit ``node_id`` for auth-only devices."""
    return registry.register_device(body)


@router.get("/devices/{device_id}", response_model=DeviceInDB)
def get_device(
    device_id: str = Path(..., description="Device ID"),
    registry: TopologyRegistry = Depends(get_topology_registry),
):
    return registry.get_device(device_id)
