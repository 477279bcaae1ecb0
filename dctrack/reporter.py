from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from dctrack.domain.filters import with_power
from dctrack.domain.models import Item

SUMMARY_LIMIT = 10


@dataclass(frozen=True)
class PowerSummary:
    """
    Power statistics over a set of items.

    Only items reporting power > 0 feed the average, maximum and minimum;
    `power_density` spreads the total over every item.
    """

    total_assets: int
    assets_with_power: int
    total_power: float
    average_power: float
    max_power: float
    min_power: Optional[float]
    power_density: float

    @property
    def total_power_kw(self) -> float:
        return self.total_power / 1000


def summarize_power(items: Sequence[Item]) -> PowerSummary:
    readings = [item.power for item in with_power(items)]
    total = sum(readings)
    return PowerSummary(
        total_assets=len(items),
        assets_with_power=len(readings),
        total_power=total,
        average_power=total / len(readings) if readings else 0.0,
        max_power=max(readings, default=0.0),
        min_power=min(readings) if readings else None,
        power_density=total / len(items) if items else 0.0,
    )


def vendor_distribution(items: Sequence[Item]) -> Dict[str, int]:
    """Count items per make, most common first; items without a make are left out."""
    counts = Counter(item.make for item in items if item.make)
    return dict(sorted(counts.items(), key=lambda pair: (-pair[1], pair[0])))


def print_item_summaries(
    items: Sequence[Item],
    title: str = "Items",
    limit: int = SUMMARY_LIMIT,
    console: Optional[Console] = None,
) -> None:
    """
    Render the first `limit` items as a rich table.
    """
    console = console or Console()

    if not items:
        console.print("[yellow]No items found.[/yellow]")
        return

    caption = f"Showing {limit} of {len(items)} items" if len(items) > limit else None
    table = Table(title=f"{title} ({len(items)})", box=box.ROUNDED, caption=caption)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Location", style="magenta")
    table.add_column("Make / Model")
    table.add_column("Power (W)", justify="right", style="green")

    for item in items[:limit]:
        power = f"{item.power:.0f}" if item.power > 0 else "-"
        table.add_row(item.id, item.name, item.location, f"{item.make} {item.model}".strip(), power)

    console.print(table)


def print_item_details(item: Item, console: Optional[Console] = None) -> None:
    """Render one item as a two-column property table."""
    console = console or Console()

    table = Table(title=f"Item {item.id}", box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")

    rows: List[tuple] = [
        ("Name", item.name),
        ("Status", item.status),
        ("Class", item.item_class),
        ("Location", item.location),
        ("Cabinet", item.cabinet),
        ("Position", f"{item.position} (Height: {item.height} RU)"),
        ("Make / Model", f"{item.make} {item.model}".strip()),
        ("Serial Number", item.serial_number),
    ]
    # Optional fields only when populated.
    if item.power > 0:
        rows.append(("Power", f"{item.power:.0f} W"))
    if item.asset_tag:
        rows.append(("Asset Tag", item.asset_tag))
    if item.primary_contact:
        rows.append(("Primary Contact", item.primary_contact))
    if item.system_admin_team:
        rows.append(("Admin Team", item.system_admin_team))
    if item.install_date is not None:
        rows.append(("Install Date", item.install_date.strftime("%Y-%m-%d")))
    if item.contract_end_date is not None:
        rows.append(("Contract End", item.contract_end_date.strftime("%Y-%m-%d")))
    for label, value in sorted(item.custom_fields.items()):
        rows.append((label, value))

    for label, value in rows:
        table.add_row(label, value)
    console.print(table)


def print_vendor_distribution(items: Sequence[Item], console: Optional[Console] = None) -> None:
    console = console or Console()
    distribution = vendor_distribution(items)

    table = Table(title="Vendor Distribution", box=box.ROUNDED)
    table.add_column("Vendor", style="cyan")
    table.add_column("Assets", justify="right", style="magenta")
    for vendor, count in distribution.items():
        table.add_row(vendor, str(count))
    console.print(table)


def print_power_summary(summary: PowerSummary, console: Optional[Console] = None) -> None:
    console = console or Console()

    table = Table(title="Power Analysis", box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="green")
    table.add_row("Total Assets", str(summary.total_assets))
    table.add_row("Assets with Power Data", str(summary.assets_with_power))
    table.add_row("Total Power", f"{summary.total_power_kw:.2f} kW")
    table.add_row("Average Power", f"{summary.average_power:.2f} W")
    table.add_row("Maximum Power", f"{summary.max_power:.2f} W")
    if summary.min_power is not None:
        table.add_row("Minimum Power", f"{summary.min_power:.2f} W")
    table.add_row("Power Density", f"{summary.power_density:.2f} W/asset")
    console.print(table)


__all__ = [
    "PowerSummary",
    "print_item_details",
    "print_item_summaries",
    "print_power_summary",
    "print_vendor_distribution",
    "summarize_power",
    "vendor_distribution",
]
