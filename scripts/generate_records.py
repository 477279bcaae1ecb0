"""
Synthetic dcTrack record generator.

Produces deterministic pseudo-random wire records in the service's own field
vocabulary (tiName, cmbLocation, tiItemOriginalPower, ...) and writes them as
quicksearch page envelopes, one JSON file per page. Useful for fixtures,
demos, and exercising the mapper against a realistic mix of value types.
"""

from __future__ import annotations

import json
import random
import sys
import time
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import typer

app = typer.Typer(help="Generate synthetic dcTrack quicksearch pages (JSON).")

LOCATIONS = ["RDU2", "IAD1", "PHX3", "AMS1"]
STATUSES = ["Installed", "Planned", "Storage", "Off-Site"]
CLASSES = ["Device", "Network", "Cabinet", "Rack PDU"]
VENDORS = {
    "Dell": ["PowerEdge R650", "PowerEdge R750"],
    "HPE": ["ProLiant DL360", "ProLiant DL380"],
    "Cisco": ["Nexus 93180", "Catalyst 9300"],
    "Lenovo": ["ThinkSystem SR650"],
}
SHAPES = ("records", "searchResults")


def _generate_records(count: int, seed: int = 42, start_id: int = 1) -> list[dict[str, Any]]:
    """
    Build `count` wire records. The same seed always yields the same records.

    Values mix types the way the service does: power as a number
    or numeric string, flags as booleans or "true"/"false", dates in the
    service's space-offset format.
    """
    rng = random.Random(seed)
    base_date = datetime(2020, 1, 1, tzinfo=UTC)
    records: list[dict[str, Any]] = []

    for offset in range(count):
        item_id = start_id + offset
        make = rng.choice(sorted(VENDORS))
        power = round(rng.uniform(150, 1200), 1)
        installed = base_date + timedelta(days=rng.randint(0, 1500))
        record: dict[str, Any] = {
            "id": item_id,
            "tiName": f"{rng.choice(LOCATIONS).lower()}-srv-{item_id:05d}",
            "tiClass": rng.choice(CLASSES),
            "cmbStatus": rng.choice(STATUSES),
            "cmbLocation": rng.choice(LOCATIONS),
            "cmbCabinet": f"C{rng.randint(1, 40):02d}",
            "cmbUPosition": rng.randint(1, 42),
            "tiRUs": rng.choice([1, 2, 4]),
            "cmbMake": make,
            "cmbModel": rng.choice(VENDORS[make]),
            "tiSerialNumber": f"SN{rng.randint(10**7, 10**8 - 1)}",
            "tiItemOriginalPower": power if rng.random() < 0.5 else str(power),
            "chkItemAutoPowerBudget": rng.choice([True, False, "true", "false"]),
            "installationDate": installed.strftime("%Y-%m-%d %H:%M:%S+00"),
            "lastUpdatedOn": (installed + timedelta(days=30)).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "tiCustomField_Asset Status": rng.choice(["Active", "Retiring"]),
        }
        records.append(record)
    return records


def _paginate(
    records: list[dict[str, Any]],
    page_size: int,
    shape: str = "records",
) -> list[dict[str, Any]]:
    """
    Split records into page envelopes of the given shape.

    An exact multiple of the page size gets a trailing empty page, matching
    what the service returns when a client asks past the end.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    if shape not in SHAPES:
        raise ValueError(f"unknown shape {shape!r}; expected one of {', '.join(SHAPES)}")

    chunks = [records[i : i + page_size] for i in range(0, len(records), page_size)]
    if not chunks or len(chunks[-1]) == page_size:
        chunks.append([])

    pages: list[dict[str, Any]] = []
    for number, chunk in enumerate(chunks, start=1):
        if shape == "records":
            pages.append({"records": chunk})
        else:
            pages.append(
                {
                    "totalRows": len(records),
                    "pageNumber": number,
                    "pageSize": page_size,
                    "searchResults": {"items": chunk},
                }
            )
    return pages


@app.command()
def main(
    count: int = typer.Option(
        250,
        "--count",
        "-n",
        help="Number of records to generate.",
    ),
    page_size: int = typer.Option(
        100,
        "--page-size",
        "-p",
        help="Records per page envelope.",
    ),
    shape: str = typer.Option(
        "records",
        "--shape",
        help="Envelope shape: records or searchResults.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output: Path = typer.Option(
        Path("data/pages"),
        "--output",
        "-o",
        help="Directory for page_0001.json, page_0002.json, ...",
    ),
) -> None:
    """
    Generate synthetic records and write them as page envelopes.
    """
    start = time.perf_counter()
    output.mkdir(parents=True, exist_ok=True)

    typer.echo(f"Generating {count:,} records -> {output} (page_size={page_size}, shape={shape}, seed={seed})")
    pages = _paginate(_generate_records(count, seed=seed), page_size=page_size, shape=shape)
    for number, page in enumerate(pages, start=1):
        path = output / f"page_{number:04d}.json"
        path.write_text(json.dumps(page, indent=2), encoding="utf-8")

    duration = time.perf_counter() - start
    typer.echo(f"Wrote {len(pages)} pages in {duration:.2f}s")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
