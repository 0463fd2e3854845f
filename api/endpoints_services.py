"""Service catalog endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

import catalog
from auth import Principal, require_admin, require_any_role
from errors import NotFoundError
from records import PRICING_TYPE_LABELS, Service
from schemas_catalog import ServiceIn, ServiceUpdateIn
from storage import Storage, get_store
from utils.audit import log_action

router = APIRouter(prefix="/api/services", tags=["services"])


@router.get("", response_model=List[Service])
async def list_services(
    search: Optional[str] = Query(None, max_length=100),
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    return catalog.search_services(store.services.load(), search)


@router.get("/pricing-types")
async def list_pricing_types(principal: Principal = Depends(require_any_role)):
    """Pricing types with their display labels."""
    return [{"value": t.value, "label": label} for t, label in PRICING_TYPE_LABELS.items()]


@router.get("/{service_id}", response_model=Service)
async def get_service(
    service_id: str,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    service = store.services.get(service_id)
    if service is None:
        raise NotFoundError("Service", service_id)
    return service


@router.post("", response_model=Service, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: ServiceIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    services, service = catalog.create_service(store.services.load(), **data.model_dump())
    store.services.save(services)
    store.commit()
    log_action(admin.employee_id, "service.create", {"service_id": service.id})
    return service


@router.patch("/{service_id}", response_model=Service)
async def update_service(
    service_id: str,
    data: ServiceUpdateIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    services, service = catalog.update_service(
        store.services.load(), service_id, **data.model_dump(exclude_unset=True)
    )
    store.services.save(services)
    store.commit()
    log_action(admin.employee_id, "service.update", {"service_id": service_id})
    return service


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: str,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    store.services.save(catalog.delete_service(store.services.load(), service_id))
    store.commit()
    log_action(admin.employee_id, "service.delete", {"service_id": service_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
