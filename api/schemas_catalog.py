"""Client / service / task schemas."""
from typing import Optional

from pydantic import Field

from records import Client, ClientService, PricingType, Task
from schemas import ApiModel


class ClientIn(ApiModel):
    """Create client request."""
    name: str = Field(..., max_length=255)
    company: Optional[str] = None
    tax_id: Optional[str] = Field(None, alias="eik")
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class ClientUpdateIn(ApiModel):
    """Update client request (only fields sent are changed)."""
    name: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = None
    tax_id: Optional[str] = Field(None, alias="eik")
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class ServiceIn(ApiModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    pricing_type: PricingType = PricingType.HOURLY


class ServiceUpdateIn(ApiModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    pricing_type: Optional[PricingType] = None


class TaskIn(ApiModel):
    service_id: str
    name: str = Field(..., max_length=255)
    is_active: bool = True


class TaskUpdateIn(ApiModel):
    service_id: Optional[str] = None
    name: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class TaskOut(Task):
    """Task with its service name resolved."""
    service_name: str


class ClientServiceIn(ApiModel):
    """Attach a service to a client.

    pricing_type defaults to the service's pricing type; only the price
    matching the pricing type is kept.
    """
    service_id: str
    pricing_type: Optional[PricingType] = None
    monthly_fixed_price: Optional[float] = None
    hourly_rate: Optional[float] = None
    one_time_price: Optional[float] = None
    commission_rate_pct: Optional[float] = None


class ClientServiceUpdateIn(ApiModel):
    pricing_type: Optional[PricingType] = None
    monthly_fixed_price: Optional[float] = None
    hourly_rate: Optional[float] = None
    one_time_price: Optional[float] = None
    commission_rate_pct: Optional[float] = None


class ClientServiceOut(ClientService):
    service_name: str
    price_summary: str


class ClientDetailOut(ApiModel):
    client: Client
    services: list[ClientServiceOut]
