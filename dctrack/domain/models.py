"""
Domain models for the dcTrack client.

`Item` is the normalized, strongly-typed view of one inventory asset. It is
built only by the record mapper, which has already coerced every wire value,
so the model itself performs no parsing. Credentials and tokens are small
immutable value objects that never print their secrets.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Credentials:
    """Username/password pair used for HTTP basic authentication at login."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Token:
    """Bearer token issued by the login endpoint, scoped to one operation."""

    value: str

    def authorization_header(self) -> str:
        return f"Bearer {self.value}"

    def __repr__(self) -> str:
        return f"Token(<{len(self.value)} chars>)"


class Item(BaseModel):
    """
    Representation of a single dcTrack inventory item.

    Identity fields are always present (possibly empty, except `id`); every
    other field falls back to its type's zero value, and date fields to None,
    when the wire record omits or garbles them.
    """

    # Identity
    id: str = Field(..., min_length=1, description="dcTrack item identifier.")
    name: str = Field("", description="Item name (tiName).")
    item_class: str = Field("", description="Item class, e.g. Device or Network.")
    status: str = Field("", description="Lifecycle status, e.g. Installed.")
    location: str = Field("", description="Site/location code.")

    # Placement
    cabinet: str = ""
    cabinet_id: str = ""
    position: str = ""
    height: int = Field(0, description="Height in rack units.")
    plant_bay: str = ""
    row_label: str = ""
    row_position: str = ""
    floor_name: str = ""
    floor_node_code: str = ""
    room_name: str = ""
    room_node_code: str = ""

    # Asset
    make: str = ""
    model: str = ""
    serial_number: str = ""
    asset_tag: str = ""
    subclass: str = ""
    form_factor: str = ""
    mounting: str = ""
    part_number: str = ""
    width: float = 0.0
    depth: float = 0.0
    weight: float = 0.0

    # Power
    original_power: float = Field(0.0, description="Nameplate power in watts.")
    effective_power: float = 0.0
    potential_power: float = 0.0
    power_capacity: float = 0.0
    ps_redundancy: str = ""
    auto_power_budget: bool = False
    derate_amps: bool = False
    budget_status: str = ""

    # Financial
    purchase_price: float = 0.0
    contract_amount: float = 0.0
    po_number: str = ""

    # Network
    ip_addresses: str = ""
    ip_address_port_name: str = ""
    free_data_port_count: int = 0
    free_power_port_count: int = 0

    # Technical
    ram: int = 0
    cpu_quantity: int = 0
    cpu_type: str = ""
    processes: int = 0
    users: int = 0

    # Integration
    integration_status: str = ""
    vmware_integration_status: str = ""
    cmdb_integration_status: str = ""

    # Administrative
    primary_contact: str = ""
    contact_team_name: str = ""
    system_admin_team: str = ""
    system_admin: str = ""
    customer: str = ""
    notes: str = ""

    # Dates
    install_date: Optional[datetime] = None
    contract_end_date: Optional[datetime] = None
    purchase_date: Optional[datetime] = None
    planned_decommission_date: Optional[datetime] = None
    warranty_expiration_date: Optional[datetime] = None
    audit_date: Optional[datetime] = None
    last_service_date: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None

    custom_fields: Dict[str, str] = Field(
        default_factory=dict,
        description="tiCustomField_<Label> values keyed by label.",
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @property
    def power(self) -> float:
        """Alias of `original_power`, the figure most reports aggregate on."""
        return self.original_power


__all__ = ["Credentials", "Token", "Item"]
