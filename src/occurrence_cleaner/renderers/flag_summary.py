"""Flag and filter summary tables."""

from __future__ import annotations

from typing import Any

from occurrence_cleaner.renderers import render_template

STAGE_LABELS = {
    "fetched": "Fetched",
    "projected": "Projected",
    "geo_filter": "With coordinates",
    "flagger": "Passed flag tests",
    "quality_filter": "Passed quality filters",
}

TEST_LABELS = {
    "capitals": "Near country capital",
    "centroids": "Near country centroid",
    "equal": "Longitude equals latitude",
    "gbif": "Near GBIF headquarters",
    "institutions": "Near biodiversity institution",
    "zeros": "Zero coordinates",
    "summary": "Any test",
}


def build_flag_summary_html(
    summary: dict[str, Any],
    per_year: dict[int, int] | None = None,
) -> str:
    """Build HTML tables for stage counts, per-test failures and records per year.

    ``summary`` is ``CleaningResult.summary()`` (or the same dict read back
    from the store).
    """
    stage_counts: dict[str, int] = summary.get("stage_counts", {})
    flag_counts: dict[str, int] = summary.get("flag_counts", {})
    fetched = stage_counts.get("fetched", 0)

    stages = [
        {
            "label": STAGE_LABELS.get(name, name),
            "count": count,
            "pct": (100.0 * count / fetched) if fetched else 0.0,
        }
        for name, count in stage_counts.items()
    ]
    tests = [
        {"name": name, "label": TEST_LABELS.get(name, name), "failed": failed}
        for name, failed in flag_counts.items()
    ]
    years = sorted((per_year or {}).items())

    return render_template(
        "flag_summary.html.j2",
        stages=stages,
        tests=tests,
        years=years,
        unmapped=summary.get("unmapped_country_codes", []),
        warnings=summary.get("warnings", []),
        rejected=summary.get("rejected", 0),
    )
