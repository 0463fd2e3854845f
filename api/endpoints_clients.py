"""Client endpoints and client-service attachments.

Any authenticated principal can read (employees pick clients when logging
time); writes are admin only.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

import catalog
from auth import Principal, require_admin, require_any_role
from errors import NotFoundError
from records import UNKNOWN_NAME, Client, ClientService
from schemas_catalog import (
    ClientDetailOut,
    ClientIn,
    ClientServiceIn,
    ClientServiceOut,
    ClientServiceUpdateIn,
    ClientUpdateIn,
)
from storage import Storage, get_store
from utils.audit import log_action
from utils.money import price_summary

router = APIRouter(prefix="/api/clients", tags=["clients"])


def _service_out(record: ClientService, service_names: dict) -> ClientServiceOut:
    return ClientServiceOut(
        **record.model_dump(),
        service_name=service_names.get(record.service_id, UNKNOWN_NAME),
        price_summary=price_summary(record),
    )


def _services_of(store: Storage, client_id: str) -> List[ClientServiceOut]:
    service_names = {s.id: s.name for s in store.services.load()}
    return [
        _service_out(cs, service_names)
        for cs in store.client_services.load()
        if cs.client_id == client_id
    ]


@router.get("", response_model=List[Client])
async def list_clients(
    search: Optional[str] = Query(None, max_length=100),
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Clients matching ``search`` (name, company or email), alphabetical."""
    clients = catalog.search_clients(store.clients.load(), search)
    return sorted(clients, key=lambda c: c.name.lower())


@router.get("/{client_id}", response_model=ClientDetailOut)
async def get_client(
    client_id: str,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    client = store.clients.get(client_id)
    if client is None:
        raise NotFoundError("Client", client_id)
    return ClientDetailOut(client=client, services=_services_of(store, client_id))


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    clients, client = catalog.create_client(store.clients.load(), **data.model_dump())
    store.clients.save(clients)
    store.commit()
    log_action(admin.employee_id, "client.create", {"client_id": client.id})
    return client


@router.patch("/{client_id}", response_model=Client)
async def update_client(
    client_id: str,
    data: ClientUpdateIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    clients, client = catalog.update_client(
        store.clients.load(), client_id, **data.model_dump(exclude_unset=True)
    )
    store.clients.save(clients)
    store.commit()
    log_action(admin.employee_id, "client.update", {"client_id": client_id})
    return client


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    """Delete a client. Logged time stays and rolls up under "Unknown"."""
    store.clients.save(catalog.delete_client(store.clients.load(), client_id))
    store.commit()
    log_action(admin.employee_id, "client.delete", {"client_id": client_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Client services
# ---------------------------------------------------------------------------

@router.get("/{client_id}/services", response_model=List[ClientServiceOut])
async def list_client_services(
    client_id: str,
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    if store.clients.get(client_id) is None:
        raise NotFoundError("Client", client_id)
    return _services_of(store, client_id)


@router.post("/{client_id}/services", response_model=ClientServiceOut, status_code=status.HTTP_201_CREATED)
async def attach_service(
    client_id: str,
    data: ClientServiceIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    services = store.services.load()
    client_services, record = catalog.attach_service(
        store.client_services.load(),
        store.clients.load(),
        services,
        client_id=client_id,
        **data.model_dump(),
    )
    store.client_services.save(client_services)
    store.commit()
    log_action(admin.employee_id, "client_service.attach", {"client_id": client_id, "service_id": data.service_id})
    return _service_out(record, {s.id: s.name for s in services})


def _owned(store: Storage, client_id: str, client_service_id: str) -> List[ClientService]:
    client_services = store.client_services.load()
    if not any(cs.id == client_service_id and cs.client_id == client_id for cs in client_services):
        raise NotFoundError("ClientService", client_service_id)
    return client_services


@router.patch("/{client_id}/services/{client_service_id}", response_model=ClientServiceOut)
async def update_client_service(
    client_id: str,
    client_service_id: str,
    data: ClientServiceUpdateIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    client_services, record = catalog.update_client_service(
        _owned(store, client_id, client_service_id),
        client_service_id,
        **data.model_dump(exclude_unset=True),
    )
    store.client_services.save(client_services)
    store.commit()
    log_action(admin.employee_id, "client_service.update", {"client_service_id": client_service_id})
    return _service_out(record, {s.id: s.name for s in store.services.load()})


@router.delete("/{client_id}/services/{client_service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def detach_service(
    client_id: str,
    client_service_id: str,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    store.client_services.save(
        catalog.detach_service(_owned(store, client_id, client_service_id), client_service_id)
    )
    store.commit()
    log_action(admin.employee_id, "client_service.detach", {"client_service_id": client_service_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
