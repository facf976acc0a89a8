"""GBIF-specific reference coordinates."""

from __future__ import annotations

from typing import NamedTuple


class Point(NamedTuple):
    lon: float
    lat: float


# GBIF Secretariat, Universitetsparken 15, Copenhagen. Records geocoded to
# the publisher's address end up here.
GBIF_HQ = Point(lon=12.58, lat=55.67)
