"""
Resource Library Routes

GET /resources - List resources (public)
POST /resources - Share a resource
DELETE /resources/{resource_id} - Delete resource (creator only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from careerflow.core.auth import get_current_user
from careerflow.core.permissions import Capability, require_capability
from careerflow.db.mongodb import get_db
from careerflow.services.resource_service import ResourceService
from careerflow.schemas.schemas import (
    ResourceCreate, ResourceEnvelope, ResourceListResponse, ResourceSort,
    ResourceType, ResourceCategory, MessageResponse
)

router = APIRouter(prefix="/resources", tags=["Resources"])


def get_resource_service(db: Database = Depends(get_db)) -> ResourceService:
    return ResourceService(db)


@router.get("", response_model=ResourceListResponse)
def list_resources(
    type: Optional[ResourceType] = Query(None),
    category: Optional[ResourceCategory] = Query(None),
    search: Optional[str] = Query(None, description="Search title, description and tags"),
    sort_by: ResourceSort = Query(ResourceSort.newest),
    service: ResourceService = Depends(get_resource_service)
):
    """Browse the library. popular = most liked first."""
    resources = service.list_resources(
        search=search,
        type=type.value if type else None,
        category=category.value if category else None,
        sort_by=sort_by
    )
    return ResourceListResponse(resources=resources)


@router.post("", response_model=ResourceEnvelope, status_code=201)
def create_resource(
    resource: ResourceCreate,
    user: dict = Depends(require_capability(Capability.share_resources)),
    service: ResourceService = Depends(get_resource_service)
):
    return ResourceEnvelope(
        message="Resource created successfully",
        resource=service.create_resource(user, resource)
    )


@router.delete("/{resource_id}", response_model=MessageResponse)
def delete_resource(
    resource_id: str,
    user: dict = Depends(get_current_user),
    service: ResourceService = Depends(get_resource_service)
):
    service.delete_resource(user, resource_id)
    return MessageResponse(message="Resource deleted")
