"""
Record mapping: untyped dcTrack wire records -> typed `Item` models.

The service returns each asset as an open bag of loosely-typed scalars whose
keys drift between releases (`cmbPosition` vs `cmbUPosition`, `tiName` vs
`name`). Two pieces keep that mess contained:

- `RawValue` tags each scalar once (null, text, number, boolean, nested) and
  offers total coercions to str/float/int/bool/datetime, each with a fixed
  default when the value is missing or unparseable.
- `FIELD_RULES` declares, per `Item` attribute, the target coercion and the
  ordered list of wire aliases to try.

Validation policy: the identifier is always required. The remaining identity
fields (name, class, status, location) default to empty strings unless the
mapper is built with them in `required_fields` (see `RecordMapper.strict`).
"""

from __future__ import annotations

import enum
import json
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from dctrack.domain.models import Item
from dctrack.errors import MappingError

CUSTOM_FIELD_PREFIX = "tiCustomField_"
IDENTITY_FIELDS: Tuple[str, ...] = ("id", "name", "item_class", "status", "location")

_TRUE_TEXTS = frozenset({"true", "1"})
_SHORT_OFFSET = re.compile(r"[+-]\d{2}$")
_RFC3339 = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})")
_DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_INTEGER = re.compile(r"[+-]?[0-9]+")


class RawKind(enum.Enum):
    NULL = "null"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NESTED = "nested"


def _parse_space_offset(text: str) -> datetime:
    # "2006-01-02 15:04:05-07": %z needs minutes, so pad a bare hour offset.
    if _SHORT_OFFSET.search(text):
        text = f"{text}00"
    return datetime.strptime(text, "%Y-%m-%d %H:%M:%S%z")


def _parse_zulu(text: str) -> datetime:
    return datetime.strptime(text, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)


def _parse_date_only(text: str) -> datetime:
    return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)


def _parse_rfc3339(text: str) -> datetime:
    # Offset is mandatory; naive and compact ISO forms stay unparsed.
    if not _RFC3339.fullmatch(text):
        raise ValueError(f"not an RFC 3339 timestamp: {text!r}")
    return datetime.fromisoformat(text)


# Tried in order; the first parser that accepts the text wins.
DATETIME_PARSERS: Tuple[Callable[[str], datetime], ...] = (
    _parse_space_offset,
    _parse_zulu,
    _parse_date_only,
    _parse_rfc3339,
)


@dataclass(frozen=True)
class RawValue:
    """
    One wire scalar, tagged by kind, with its canonical text form.

    The text form mirrors how the service renders values: booleans as
    `true`/`false`, integral numbers without a trailing `.0`.
    """

    kind: RawKind
    text: str = ""

    @classmethod
    def null(cls) -> "RawValue":
        return cls(RawKind.NULL)

    @classmethod
    def of(cls, value: Any) -> "RawValue":
        if value is None:
            return cls.null()
        if isinstance(value, bool):
            return cls(RawKind.BOOLEAN, "true" if value else "false")
        if isinstance(value, int):
            return cls(RawKind.NUMBER, str(value))
        if isinstance(value, float):
            if math.isfinite(value) and value.is_integer():
                return cls(RawKind.NUMBER, str(int(value)))
            return cls(RawKind.NUMBER, repr(value))
        if isinstance(value, str):
            return cls(RawKind.TEXT, value)
        return cls(RawKind.NESTED, json.dumps(value, sort_keys=True, default=str))

    @property
    def is_null(self) -> bool:
        return self.kind is RawKind.NULL

    def as_str(self) -> str:
        return self.text

    def as_float(self) -> float:
        if self.is_null or not _DECIMAL.fullmatch(self.text):
            return 0.0
        try:
            parsed = float(self.text)
        except ValueError:
            return 0.0
        return parsed if math.isfinite(parsed) else 0.0

    def as_int(self) -> int:
        if self.is_null or not _INTEGER.fullmatch(self.text):
            return 0
        try:
            return int(self.text)
        except ValueError:
            return 0

    def as_bool(self) -> bool:
        return self.text in _TRUE_TEXTS

    def as_datetime(self) -> Optional[datetime]:
        if self.is_null or not self.text:
            return None
        for parser in DATETIME_PARSERS:
            try:
                return parser(self.text)
            except ValueError:
                continue
        return None


class RawRecord:
    """Read-only view over one wire record with alias-aware lookups."""

    def __init__(self, fields: Mapping[str, Any]) -> None:
        self._fields = fields

    def lookup(self, aliases: Iterable[str]) -> RawValue:
        """Return the first alias carrying a non-null value, else a null value."""
        for alias in aliases:
            value = self._fields.get(alias)
            if value is not None:
                return RawValue.of(value)
        return RawValue.null()

    def custom_fields(self) -> Dict[str, str]:
        custom: Dict[str, str] = {}
        for key, value in self._fields.items():
            if not key.startswith(CUSTOM_FIELD_PREFIX):
                continue
            text = RawValue.of(value).as_str()
            if text:
                custom[key[len(CUSTOM_FIELD_PREFIX) :]] = text
        return custom


@dataclass(frozen=True)
class FieldRule:
    attr: str
    coerce: Callable[[RawValue], Any]
    aliases: Tuple[str, ...]


def _rule(attr: str, coerce: Callable[[RawValue], Any], *aliases: str) -> FieldRule:
    return FieldRule(attr=attr, coerce=coerce, aliases=aliases)


_str = RawValue.as_str
_float = RawValue.as_float
_int = RawValue.as_int
_bool = RawValue.as_bool
_date = RawValue.as_datetime

FIELD_RULES: Tuple[FieldRule, ...] = (
    # identity
    _rule("id", _str, "id", "itemId", "tiItemId"),
    _rule("name", _str, "tiName", "name", "itemName"),
    _rule("item_class", _str, "tiClass", "class", "itemClass"),
    _rule("status", _str, "cmbStatus", "status"),
    _rule("location", _str, "cmbLocation", "location"),
    # placement
    _rule("cabinet", _str, "cmbCabinet", "cabinet"),
    _rule("cabinet_id", _str, "cmbCabinetId"),
    _rule("position", _str, "cmbUPosition", "cmbPosition", "position"),
    _rule("height", _int, "tiRUs", "height"),
    _rule("plant_bay", _str, "cmbPlantBay"),
    _rule("row_label", _str, "cmbRowLabel"),
    _rule("row_position", _str, "cmbRowPosition"),
    _rule("floor_name", _str, "tiFloorName"),
    _rule("floor_node_code", _str, "tiFloorNodeCode"),
    _rule("room_name", _str, "tiRoomName"),
    _rule("room_node_code", _str, "tiRoomNodeCode"),
    # asset
    _rule("make", _str, "cmbMake", "make"),
    _rule("model", _str, "cmbModel", "model"),
    _rule("serial_number", _str, "tiSerialNumber", "serialNumber"),
    _rule("asset_tag", _str, "tiAssetTag", "assetTag"),
    _rule("subclass", _str, "tiSubclass"),
    _rule("form_factor", _str, "tiFormFactor"),
    _rule("mounting", _str, "tiMounting"),
    _rule("part_number", _str, "tiPartNumber"),
    _rule("width", _float, "tiWidth"),
    _rule("depth", _float, "tiDepth"),
    _rule("weight", _float, "tiWeight"),
    # power
    _rule("original_power", _float, "tiItemOriginalPower", "originalPower", "power"),
    _rule("effective_power", _float, "tiEffectivePower", "effectivePower"),
    _rule("potential_power", _float, "tiPotentialPower", "potentialPower"),
    _rule("power_capacity", _float, "tiPowerCapacity"),
    _rule("ps_redundancy", _str, "tiPSRedundancy"),
    _rule("auto_power_budget", _bool, "chkItemAutoPowerBudget"),
    _rule("derate_amps", _bool, "chkDerateAmps"),
    _rule("budget_status", _str, "tiItemBudgetStatus"),
    # financial
    _rule("purchase_price", _float, "tiPurchasePrice"),
    _rule("contract_amount", _float, "tiContractAmount"),
    _rule("po_number", _str, "tiPONumber"),
    # network
    _rule("ip_addresses", _str, "ipAddresses"),
    _rule("ip_address_port_name", _str, "ipAddressPortName"),
    _rule("free_data_port_count", _int, "tifreeDataPortCount"),
    _rule("free_power_port_count", _int, "tifreePowerPortCount"),
    # technical
    _rule("ram", _int, "tiRAM"),
    _rule("cpu_quantity", _int, "tiCpuQuantity"),
    _rule("cpu_type", _str, "tiCpuType"),
    _rule("processes", _int, "tiProcesses"),
    _rule("users", _int, "tiUsers"),
    # integration
    _rule("integration_status", _str, "tiIntegrationStatus"),
    _rule("vmware_integration_status", _str, "tiVMwareIntegrationStatus"),
    _rule("cmdb_integration_status", _str, "tiCmdbIntegrationStatus"),
    # administrative
    _rule("primary_contact", _str, "tiCustomField_Primary Contact", "primaryContact"),
    _rule("contact_team_name", _str, "tiCustomField_Contact Team Name"),
    _rule("system_admin_team", _str, "cmbSystemAdminTeam"),
    _rule("system_admin", _str, "cmbSystemAdmin"),
    _rule("customer", _str, "cmbCustomer"),
    _rule("notes", _str, "tiNotes"),
    # dates
    _rule("install_date", _date, "installationDate", "installDate"),
    _rule("contract_end_date", _date, "contractEndDate"),
    _rule("purchase_date", _date, "purchaseDate"),
    _rule("planned_decommission_date", _date, "tiPlannedDecommDate"),
    _rule("warranty_expiration_date", _date, "tiCustomField_Warranty Expiration Date"),
    _rule("audit_date", _date, "tiCustomField_Audit Date"),
    _rule("last_service_date", _date, "lastServiceDate"),
    _rule("last_updated_at", _date, "lastUpdatedOn", "lastUpdated"),
)


class RecordMapper:
    """
    Convert raw wire records into `Item` instances.

    Parameters
    ----------
    required_fields : iterable[str]
        Identity attributes that must be non-empty. `id` is always included.
    """

    def __init__(self, required_fields: Iterable[str] = ("id",)) -> None:
        required = tuple(dict.fromkeys(("id", *required_fields)))
        unknown = [name for name in required if name not in IDENTITY_FIELDS]
        if unknown:
            raise ValueError(
                f"Only identity fields can be required, got: {', '.join(unknown)}"
            )
        self.required_fields = required

    @classmethod
    def strict(cls) -> "RecordMapper":
        """Mapper that rejects records missing any identity field."""
        return cls(required_fields=IDENTITY_FIELDS)

    def map(self, raw: Any) -> Item:
        """
        Coerce one wire record into an Item.

        Raises
        ------
        MappingError
            If the record is not an object or a required field is empty.
        """
        if not isinstance(raw, Mapping):
            raise MappingError("record", f"record is not an object: {type(raw).__name__}")

        record = RawRecord(raw)
        values: Dict[str, Any] = {
            rule.attr: rule.coerce(record.lookup(rule.aliases)) for rule in FIELD_RULES
        }
        for name in self.required_fields:
            if not values[name]:
                raise MappingError(name)

        values["custom_fields"] = record.custom_fields()
        return Item(**values)


__all__ = [
    "CUSTOM_FIELD_PREFIX",
    "DATETIME_PARSERS",
    "FIELD_RULES",
    "IDENTITY_FIELDS",
    "FieldRule",
    "RawKind",
    "RawRecord",
    "RawValue",
    "RecordMapper",
]
