"""
Query filters and field-selection payloads for the quicksearch endpoint.
"""
from __future__ import annotations

import enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from dctrack.domain.models import Item

INSTALLED = "Installed"

# Wire query parameter name for each optional predicate, in emission order.
_PREDICATE_PARAMS = (
    ("location", "location"),
    ("status", "status"),
    ("item_class", "itemClass"),
    ("make", "make"),
    ("model", "model"),
    ("search_text", "searchText"),
)


class FilterSpec(BaseModel):
    """
    Caller-supplied constraints for an item fetch.

    Every field is optional; an unset predicate leaves that dimension
    unconstrained. Setting `page_number` pins the fetch to that single page.
    """

    location: Optional[str] = None
    status: Optional[str] = None
    item_class: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    search_text: Optional[str] = None
    page_number: Optional[int] = Field(None, ge=1)
    page_size: Optional[int] = Field(None, ge=1)

    model_config = {"frozen": True}

    def with_location(self, location: str) -> "FilterSpec":
        return self.model_copy(update={"location": location})

    def with_status(self, status: str) -> "FilterSpec":
        return self.model_copy(update={"status": status})

    def with_item_class(self, item_class: str) -> "FilterSpec":
        return self.model_copy(update={"item_class": item_class})

    def with_make(self, make: str) -> "FilterSpec":
        return self.model_copy(update={"make": make})

    def with_model(self, model: str) -> "FilterSpec":
        return self.model_copy(update={"model": model})

    def with_search_text(self, text: str) -> "FilterSpec":
        return self.model_copy(update={"search_text": text})

    def with_pagination(self, page: int, size: int) -> "FilterSpec":
        # Routed through the constructor so the ge=1 bounds still apply.
        return FilterSpec(**{**self.model_dump(), "page_number": page, "page_size": size})

    @property
    def single_page(self) -> bool:
        return self.page_number is not None

    def to_query_params(self, page_number: int, page_size: int) -> Dict[str, Any]:
        """
        Build the quicksearch query string parameters for one page.

        Empty strings count as unset so they never reach the wire.
        """
        params: Dict[str, Any] = {"pageNumber": page_number, "pageSize": page_size}
        for attr, wire_name in _PREDICATE_PARAMS:
            value = getattr(self, attr)
            if value:
                params[wire_name] = value
        return params


def installed_only() -> FilterSpec:
    return FilterSpec(status=INSTALLED)


def by_location(location: str) -> FilterSpec:
    return FilterSpec(location=location, status=INSTALLED)


def by_vendor(make: str) -> FilterSpec:
    return FilterSpec(make=make, status=INSTALLED)


def power_assets() -> FilterSpec:
    """Installed items; pair with `with_power` to drop those reporting no power."""
    return FilterSpec(status=INSTALLED)


def with_power(items: Iterable[Item]) -> List[Item]:
    return [item for item in items if item.power > 0]


class FieldSet(str, enum.Enum):
    """Which columns to request in the quicksearch body."""

    NONE = "none"
    MINIMAL = "minimal"
    FULL = "full"


MINIMAL_COLUMNS: List[str] = [
    "id",
    "tiName",
    "cmbLocation",
    "cmbStatus",
    "tiClass",
    "cmbMake",
    "cmbModel",
    "tiItemOriginalPower",
    "lastUpdatedOn",
]

FULL_COLUMNS: List[str] = [
    # core
    "id",
    "cmbLocation",
    "tiClass",
    "cmbStatus",
    "tiName",
    "cmbMake",
    "cmbModel",
    "cmbCabinet",
    "cmbUPosition",
    "tiSerialNumber",
    "lastUpdatedOn",
    "tiItemOriginalPower",
    "cmbSystemAdminTeam",
    "tiCustomField_Primary Contact",
    # asset
    "tiSubclass",
    "tiAssetTag",
    "tiFormFactor",
    "tiMounting",
    "tiWidth",
    "tiDepth",
    "tiWeight",
    "tiRUs",
    # power and cost
    "tiPotentialPower",
    "tiEffectivePower",
    "tiPowerCapacity",
    "tiPSRedundancy",
    "tiPurchasePrice",
    "tiContractAmount",
    # infrastructure
    "cmbPlantBay",
    "cmbCabinetId",
    "cmbRowPosition",
    "cmbRowLabel",
    "tiFloorNodeCode",
    "tiFloorName",
    "tiRoomNodeCode",
    "tiRoomName",
    # integration and budget
    "tiIntegrationStatus",
    "tiVMwareIntegrationStatus",
    "tiCmdbIntegrationStatus",
    "tiItemBudgetStatus",
    "chkItemAutoPowerBudget",
    "chkDerateAmps",
    # network
    "ipAddresses",
    "ipAddressPortName",
    "tifreeDataPortCount",
    "tifreePowerPortCount",
    # technical
    "tiUsers",
    "tiRAM",
    "tiProcesses",
    "tiCpuQuantity",
    "tiCpuType",
    "tiPartNumber",
    # dates
    "installationDate",
    "contractEndDate",
    "purchaseDate",
    "tiPlannedDecommDate",
    "lastServiceDate",
    # custom fields
    "tiCustomField_Contact Team Name",
    "tiCustomField_Audit Remarks",
    "tiCustomField_Audit Date",
    "tiCustomField_Audit By",
    "tiCustomField_Warranty Expiration Date",
    "tiCustomField_Asset Status",
    "tiCustomField_PNT/IT",
    # admin
    "cmbSystemAdmin",
    "cmbCustomer",
    "tiPONumber",
    "tiNotes",
]


def build_fields_payload(field_set: FieldSet = FieldSet.NONE) -> Dict[str, Any]:
    """
    JSON body for a quicksearch request.

    FieldSet.NONE sends an empty object and lets the service pick its default
    columns.
    """
    if field_set is FieldSet.NONE:
        return {}
    columns = MINIMAL_COLUMNS if field_set is FieldSet.MINIMAL else FULL_COLUMNS
    return {"selectedColumns": [{"name": name} for name in columns]}


__all__ = [
    "FilterSpec",
    "FieldSet",
    "INSTALLED",
    "MINIMAL_COLUMNS",
    "FULL_COLUMNS",
    "build_fields_payload",
    "installed_only",
    "by_location",
    "by_vendor",
    "power_assets",
    "with_power",
]
