"""Static figures for the report.

Each builder returns a self-contained ``matplotlib.figure.Figure``; nothing
touches ``pyplot`` or its global current-figure state, so builders can run
in any order (or concurrently in separate flows) without interfering.
"""

from __future__ import annotations

import base64
import io

import pandas as pd
from matplotlib.figure import Figure

from occurrence_cleaner.cleaning.projection import LAT, LON
from occurrence_cleaner.cleaning.summary import bounding_box
from occurrence_cleaner.renderers.occurrence_map import CLEAN_COLOR, FLAGGED_COLOR

FIGSIZE = (7.0, 4.5)
DPI = 100


def _scatter(fig: Figure, frames: list[tuple[pd.DataFrame, str, str]]) -> None:
    ax = fig.add_subplot(1, 1, 1)
    for df, label, color in frames:
        if df.empty:
            continue
        ax.scatter(
            df[LON].astype(float),
            df[LAT].astype(float),
            s=8,
            alpha=0.7,
            color=color,
            label=f"{label} ({len(df)})",
            edgecolors="none",
        )
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.grid(True, linewidth=0.3, alpha=0.5)
    if any(not df.empty for df, _, _ in frames):
        ax.legend(loc="best", fontsize="small")


def build_occurrence_scatter(
    clean: pd.DataFrame,
    flagged: pd.DataFrame,
    *,
    title: str = "Clean vs flagged records",
) -> Figure:
    """World-extent scatter of clean and flagged records."""
    fig = Figure(figsize=FIGSIZE, dpi=DPI)
    _scatter(fig, [(clean, "clean", CLEAN_COLOR), (flagged, "flagged", FLAGGED_COLOR)])
    ax = fig.axes[0]
    ax.set_xlim(-180, 180)
    ax.set_ylim(-90, 90)
    ax.set_aspect("equal")
    ax.set_title(title)
    fig.tight_layout()
    return fig


def build_bounding_box_map(
    clean: pd.DataFrame,
    *,
    padding_deg: float = 1.0,
    title: str = "Clean records (bounding box)",
) -> Figure:
    """Clean records cropped to their own bounding box plus padding."""
    fig = Figure(figsize=FIGSIZE, dpi=DPI)
    _scatter(fig, [(clean, "clean", CLEAN_COLOR)])
    ax = fig.axes[0]
    bbox = bounding_box(clean, padding_deg=padding_deg)
    if bbox is not None:
        west, south, east, north = bbox
        ax.set_xlim(west, east)
        ax.set_ylim(south, north)
    else:
        ax.text(0.5, 0.5, "No clean records", ha="center", va="center", transform=ax.transAxes)
    ax.set_title(title)
    fig.tight_layout()
    return fig


def build_year_histogram(
    per_year: dict[int, int],
    *,
    title: str = "Clean records per year",
) -> Figure:
    """Bar chart of record counts by year."""
    fig = Figure(figsize=FIGSIZE, dpi=DPI)
    ax = fig.add_subplot(1, 1, 1)
    if per_year:
        years = sorted(per_year)
        ax.bar(years, [per_year[y] for y in years], color=CLEAN_COLOR, width=0.8)
    else:
        ax.text(0.5, 0.5, "No dated records", ha="center", va="center", transform=ax.transAxes)
    ax.set_xlabel("Year")
    ax.set_ylabel("Records")
    ax.set_title(title)
    fig.tight_layout()
    return fig


def figure_to_png(fig: Figure) -> bytes:
    buf = io.BytesIO()
    fig.savefig(buf, format="png")
    return buf.getvalue()


def figure_to_data_uri(fig: Figure) -> str:
    """Encode a figure as a base64 PNG ``data:`` URI for inline <img> tags."""
    return "data:image/png;base64," + base64.b64encode(figure_to_png(fig)).decode("ascii")
