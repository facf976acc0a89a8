"""Leaflet map renderer for cleaned, flagged and rejected occurrences.

Each group is drawn in its own colour. Flagged markers list the tests they
failed in the popup; rejected markers list the quality rules they broke.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from occurrence_cleaner.renderers import render_template
from occurrence_cleaner.schemas import ALL_TESTS, OccurrenceRecord

logger = logging.getLogger(__name__)

CLEAN_COLOR = "#1b9e77"
FLAGGED_COLOR = "#d95f02"
REJECTED_COLOR = "#7570b3"

STATUS_COLORS = {
    "clean": CLEAN_COLOR,
    "flagged": FLAGGED_COLOR,
    "rejected": REJECTED_COLOR,
}

# Marker count above which the map only shows a sample; Leaflet slows down past this.
MAX_MARKERS = 5000


def _failed_tests(row: dict[str, Any]) -> list[str]:
    """Names of the flag tests a record failed (columns present and False)."""
    return [t.value for t in ALL_TESTS if row.get(t.value) is not None and not row[t.value]]


def _marker(row: dict[str, Any], status: str) -> dict[str, Any] | None:
    try:
        record = OccurrenceRecord.model_validate(row)
    except ValidationError as exc:
        logger.debug("Skipping unmappable record %s: %s", row.get("gbifID"), exc)
        return None
    if record.longitude is None or record.latitude is None:
        return None
    return {
        "lat": record.latitude,
        "lon": record.longitude,
        "id": record.gbif_id or "",
        "name": record.species or "Unknown",
        "year": record.year,
        "basis": record.basis_of_record or "",
        "country": record.country_code or "",
        "status": status,
        "failed": _failed_tests(row),
        "reason": str(row.get("quality_reason") or ""),
        "color": STATUS_COLORS[status],
    }


def _allocate(sizes: list[int], budget: int) -> list[int]:
    """Split ``budget`` across groups in proportion to their size.

    Every non-empty group keeps at least one marker.
    """
    total = sum(sizes)
    if total <= budget:
        return sizes
    shares = [min(n, max(1, budget * n // total)) if n else 0 for n in sizes]
    while sum(shares) > budget:
        shares[shares.index(max(shares))] -= 1
    return shares


def _sample(markers: list[dict[str, Any]], k: int) -> list[dict[str, Any]]:
    """Evenly spaced subset of ``k`` markers, in their original order."""
    if len(markers) <= k:
        return markers
    return [markers[i * len(markers) // k] for i in range(k)]


def _markers_js(markers: list[dict[str, Any]]) -> str:
    """JSON array safe to inline inside a <script> element."""
    return json.dumps(markers, separators=(",", ":")).replace("</", "<\\/")


def build_occurrence_map_html(
    clean: list[dict[str, Any]],
    flagged: list[dict[str, Any]] | None = None,
    rejected: list[dict[str, Any]] | None = None,
    *,
    title: str = "Occurrences",
) -> tuple[str, str]:
    """Build an interactive Leaflet map of occurrence records.

    Args:
        clean: Clean records as row dicts (Darwin Core column names).
        flagged: Records that failed a flag test, with the per-test columns.
        rejected: Records that failed a quality rule, with ``quality_reason``.
        title: Heading shown above the map.

    Returns a (map_div_html, map_script_js) tuple. Past ``MAX_MARKERS`` each
    group is sampled in proportion to its size.
    """
    groups = {"clean": clean, "flagged": flagged or [], "rejected": rejected or []}
    if not any(groups.values()):
        return (render_template("occurrence_map.html.j2", title=title, empty=True), "")

    per_status = {
        status: [m for m in (_marker(row, status) for row in rows) if m is not None]
        for status, rows in groups.items()
    }
    shares = _allocate([len(m) for m in per_status.values()], MAX_MARKERS)
    truncated = sum(shares) < sum(len(m) for m in per_status.values())
    markers = [
        marker
        for group, k in zip(per_status.values(), shares, strict=True)
        for marker in _sample(group, k)
    ]

    map_div = render_template(
        "occurrence_map.html.j2",
        title=title,
        counts={status: len(rows) for status, rows in groups.items()},
        colors=STATUS_COLORS,
        truncated=truncated,
        shown=len(markers),
    )
    map_script = render_template(
        "occurrence_map_script.html.j2",
        markers_json=_markers_js(markers),
    )
    return (map_div, map_script)
