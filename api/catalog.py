"""Client / service / task catalog maintenance.

Validate-then-write helpers over plain record collections, in the same
shape as the lifecycle functions: take collections, return new ones.
Deletes never cascade into time entries; historical entries that point at
a removed client, service or task show up as "Unknown" in rollups.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from errors import NotFoundError, ValidationError
from records import (
    DEFAULT_COMMISSION_PCT,
    Client,
    ClientService,
    PricingType,
    Service,
    Task,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# pricing type -> the single price field it keeps
PRICE_FIELD = {
    PricingType.FIXED_MONTHLY: "monthly_fixed_price",
    PricingType.HOURLY: "hourly_rate",
    PricingType.FIXED_ONE_TIME: "one_time_price",
    PricingType.COMMISSION: "commission_rate_pct",
}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require_name(name: Optional[str], field: str = "name") -> str:
    name = _clean(name)
    if not name:
        raise ValidationError("Name is required", field=field)
    return name


def _get(items: Sequence, record_id: str, entity: str):
    for item in items:
        if item.id == record_id:
            return item
    raise NotFoundError(entity, record_id)


def _replace(items: Sequence, record) -> list:
    return [record if item.id == record.id else item for item in items]


def validate_email(email: Optional[str], field: str = "email") -> Optional[str]:
    email = _clean(email)
    if email is not None and not EMAIL_RE.match(email):
        raise ValidationError("Invalid email address", field=field)
    return email


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

def create_client(
    clients: Sequence[Client],
    *,
    name: str,
    company: Optional[str] = None,
    tax_id: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    notes: Optional[str] = None,
) -> Tuple[List[Client], Client]:
    client = Client(
        name=_require_name(name),
        company=_clean(company),
        tax_id=_clean(tax_id),
        email=validate_email(email),
        phone=_clean(phone),
        notes=_clean(notes),
    )
    return [*clients, client], client


def update_client(clients: Sequence[Client], client_id: str, **fields) -> Tuple[List[Client], Client]:
    """Partial update; only keys present in ``fields`` change."""
    client = _get(clients, client_id, "Client")
    changes = {}
    if "name" in fields:
        changes["name"] = _require_name(fields["name"])
    if "email" in fields:
        changes["email"] = validate_email(fields["email"])
    for key in ("company", "tax_id", "phone", "notes"):
        if key in fields:
            changes[key] = _clean(fields[key])
    updated = client.evolve(**changes)
    return _replace(clients, updated), updated


def delete_client(clients: Sequence[Client], client_id: str) -> List[Client]:
    _get(clients, client_id, "Client")
    return [c for c in clients if c.id != client_id]


def search_clients(clients: Sequence[Client], query: Optional[str] = None) -> List[Client]:
    """Case-insensitive match on name, company or email."""
    q = (query or "").strip().lower()
    if not q:
        return list(clients)
    return [
        c for c in clients
        if q in c.name.lower()
        or q in (c.company or "").lower()
        or q in (c.email or "").lower()
    ]


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def _ensure_unique_service_name(services: Sequence[Service], name: str, exclude_id: Optional[str] = None) -> None:
    lowered = name.lower()
    for service in services:
        if service.id != exclude_id and service.name.lower() == lowered:
            raise ValidationError(f"A service named '{name}' already exists", field="name")


def create_service(
    services: Sequence[Service],
    *,
    name: str,
    pricing_type: PricingType = PricingType.HOURLY,
    description: Optional[str] = None,
) -> Tuple[List[Service], Service]:
    name = _require_name(name)
    _ensure_unique_service_name(services, name)
    service = Service(name=name, pricing_type=pricing_type, description=_clean(description))
    return [*services, service], service


def update_service(services: Sequence[Service], service_id: str, **fields) -> Tuple[List[Service], Service]:
    service = _get(services, service_id, "Service")
    changes = {}
    if "name" in fields:
        name = _require_name(fields["name"])
        _ensure_unique_service_name(services, name, exclude_id=service_id)
        changes["name"] = name
    if fields.get("pricing_type") is not None:
        changes["pricing_type"] = PricingType(fields["pricing_type"])
    if "description" in fields:
        changes["description"] = _clean(fields["description"])
    updated = service.evolve(**changes)
    return _replace(services, updated), updated


def delete_service(services: Sequence[Service], service_id: str) -> List[Service]:
    _get(services, service_id, "Service")
    return [s for s in services if s.id != service_id]


def search_services(services: Sequence[Service], query: Optional[str] = None) -> List[Service]:
    q = (query or "").strip().lower()
    return [s for s in services if q in s.name.lower()] if q else list(services)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def _ensure_unique_task_name(
    tasks: Sequence[Task], service_id: str, name: str, exclude_id: Optional[str] = None
) -> None:
    lowered = name.lower()
    for task in tasks:
        if task.id != exclude_id and task.service_id == service_id and task.name.lower() == lowered:
            raise ValidationError(f"Task '{name}' already exists for this service", field="name")


def create_task(
    tasks: Sequence[Task],
    services: Sequence[Service],
    *,
    service_id: str,
    name: str,
    is_active: bool = True,
) -> Tuple[List[Task], Task]:
    if not any(s.id == service_id for s in services):
        raise ValidationError("Select a valid service", field="serviceId")
    name = _require_name(name)
    _ensure_unique_task_name(tasks, service_id, name)
    task = Task(service_id=service_id, name=name, is_active=is_active)
    return [*tasks, task], task


def update_task(
    tasks: Sequence[Task],
    services: Sequence[Service],
    task_id: str,
    **fields,
) -> Tuple[List[Task], Task]:
    task = _get(tasks, task_id, "Task")
    service_id = fields.get("service_id") or task.service_id
    if service_id != task.service_id and not any(s.id == service_id for s in services):
        raise ValidationError("Select a valid service", field="serviceId")
    name = _require_name(fields["name"]) if "name" in fields else task.name
    _ensure_unique_task_name(tasks, service_id, name, exclude_id=task_id)
    changes = {"service_id": service_id, "name": name}
    if fields.get("is_active") is not None:
        changes["is_active"] = bool(fields["is_active"])
    updated = task.evolve(**changes)
    return _replace(tasks, updated), updated


def delete_task(tasks: Sequence[Task], task_id: str) -> List[Task]:
    _get(tasks, task_id, "Task")
    return [t for t in tasks if t.id != task_id]


def filter_tasks(
    tasks: Sequence[Task],
    service_id: Optional[str] = None,
    query: Optional[str] = None,
    active_only: bool = False,
) -> List[Task]:
    result = list(tasks)
    if service_id:
        result = [t for t in result if t.service_id == service_id]
    if active_only:
        result = [t for t in result if t.is_active]
    q = (query or "").strip().lower()
    if q:
        result = [t for t in result if q in t.name.lower()]
    return result


# ---------------------------------------------------------------------------
# Client services
# ---------------------------------------------------------------------------

def pricing_fields(pricing_type: PricingType, prices: dict) -> dict:
    """Keep only the price matching ``pricing_type``; the rest are cleared.

    Raises ValidationError when the matching price is missing or negative.
    Commission falls back to the default rate when not given.
    """
    pricing_type = PricingType(pricing_type)
    field = PRICE_FIELD[pricing_type]
    value = prices.get(field)
    if pricing_type == PricingType.COMMISSION:
        value = value or DEFAULT_COMMISSION_PCT
    if value is None:
        raise ValidationError(f"A price is required for {pricing_type.value} pricing", field="price")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Enter a valid price", field="price")
    if value < 0:
        raise ValidationError("Price cannot be negative", field="price")
    result = {name: None for name in PRICE_FIELD.values()}
    result[field] = value
    return result


def attach_service(
    client_services: Sequence[ClientService],
    clients: Sequence[Client],
    services: Sequence[Service],
    *,
    client_id: str,
    service_id: str,
    pricing_type: Optional[PricingType] = None,
    **prices,
) -> Tuple[List[ClientService], ClientService]:
    """Attach a service to a client with client-specific pricing.

    ``pricing_type`` defaults to the service's own pricing type.
    """
    _get(clients, client_id, "Client")
    service = _get(services, service_id, "Service")
    if any(cs.client_id == client_id and cs.service_id == service_id for cs in client_services):
        raise ValidationError("This service is already attached to the client", field="serviceId")
    pricing_type = PricingType(pricing_type or service.pricing_type)
    record = ClientService(
        client_id=client_id,
        service_id=service_id,
        pricing_type=pricing_type,
        **pricing_fields(pricing_type, prices),
    )
    return [*client_services, record], record


def update_client_service(
    client_services: Sequence[ClientService],
    client_service_id: str,
    pricing_type: Optional[PricingType] = None,
    **prices,
) -> Tuple[List[ClientService], ClientService]:
    record = _get(client_services, client_service_id, "ClientService")
    pricing_type = PricingType(pricing_type or record.pricing_type)
    if pricing_type == record.pricing_type:
        # unchanged type: keep the stored price unless a new one is given
        field = PRICE_FIELD[pricing_type]
        if prices.get(field) is None:
            prices[field] = getattr(record, field)
    updated = record.evolve(pricing_type=pricing_type, **pricing_fields(pricing_type, prices))
    return _replace(client_services, updated), updated


def detach_service(client_services: Sequence[ClientService], client_service_id: str) -> List[ClientService]:
    _get(client_services, client_service_id, "ClientService")
    return [cs for cs in client_services if cs.id != client_service_id]
