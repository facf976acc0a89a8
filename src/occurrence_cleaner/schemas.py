"""
Domain models for occurrence cleaning.

Pydantic models and enums for GBIF occurrence records and the knobs that
drive the cleaning stages. The cleaning functions operate on DataFrames;
these models describe a single row and validate configuration.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

# =============================================================================
# Taxonomy
# =============================================================================


class Taxon(BaseModel):
    """A GBIF backbone taxon resolved from a scientific name."""

    key: int = Field(..., description="GBIF usageKey")
    scientific_name: str
    canonical_name: str | None = None
    rank: str | None = None
    family: str | None = None
    match_type: str = "EXACT"
    confidence: int | None = None


# =============================================================================
# Occurrences
# =============================================================================


class BasisOfRecord(StrEnum):
    """How an occurrence was recorded (Darwin Core ``basisOfRecord``)."""

    HUMAN_OBSERVATION = "HUMAN_OBSERVATION"
    MACHINE_OBSERVATION = "MACHINE_OBSERVATION"
    OBSERVATION = "OBSERVATION"
    PRESERVED_SPECIMEN = "PRESERVED_SPECIMEN"
    FOSSIL_SPECIMEN = "FOSSIL_SPECIMEN"
    LIVING_SPECIMEN = "LIVING_SPECIMEN"
    MATERIAL_SAMPLE = "MATERIAL_SAMPLE"
    MATERIAL_CITATION = "MATERIAL_CITATION"
    OCCURRENCE = "OCCURRENCE"
    LITERATURE = "LITERATURE"
    UNKNOWN = "UNKNOWN"


class OccurrenceRecord(BaseModel):
    """One projected occurrence row.

    Field aliases are the Darwin Core column names used in the DataFrames,
    so ``OccurrenceRecord.model_validate(row_dict)`` works on a table row.
    """

    model_config = {"populate_by_name": True}

    species: str | None = None
    longitude: float | None = Field(default=None, alias="decimalLongitude", ge=-180, le=180)
    latitude: float | None = Field(default=None, alias="decimalLatitude", ge=-90, le=90)
    country_code: str | None = Field(default=None, alias="countryCode")
    individual_count: int | None = Field(default=None, alias="individualCount", ge=0)
    gbif_id: str | None = Field(default=None, alias="gbifID")
    family: str | None = None
    taxon_rank: str | None = Field(default=None, alias="taxonRank")
    coordinate_uncertainty_m: float | None = Field(
        default=None, alias="coordinateUncertaintyInMeters", ge=0
    )
    year: int | None = None
    basis_of_record: str | None = Field(default=None, alias="basisOfRecord")
    institution_code: str | None = Field(default=None, alias="institutionCode")
    dataset_name: str | None = Field(default=None, alias="datasetName")

    @field_validator("gbif_id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        if isinstance(value, int | float):
            return str(int(value))
        return value

    @property
    def has_coordinates(self) -> bool:
        return self.longitude is not None and self.latitude is not None


# =============================================================================
# Flagging
# =============================================================================


class FlagTest(StrEnum):
    """Coordinate validity tests; each becomes a boolean column (True = pass)."""

    CAPITALS = "capitals"
    CENTROIDS = "centroids"
    EQUAL = "equal"
    GBIF = "gbif"
    INSTITUTIONS = "institutions"
    ZEROS = "zeros"

    @property
    def country_specific(self) -> bool:
        """Tests that compare against references of the record's declared country."""
        return self in (FlagTest.CAPITALS, FlagTest.CENTROIDS, FlagTest.INSTITUTIONS)


ALL_TESTS: tuple[FlagTest, ...] = tuple(FlagTest)
SUMMARY_COLUMN = "summary"


class FlagRadii(BaseModel):
    """Proximity radii for the distance-based flag tests."""

    capitals_km: float = Field(default=10.0, gt=0)
    centroids_km: float = Field(default=1.0, gt=0)
    institutions_km: float = Field(default=0.1, gt=0)
    gbif_km: float = Field(default=1.0, gt=0)
    zeros_deg: float = Field(default=0.5, ge=0)
    equal_absolute: bool = False


# =============================================================================
# Quality thresholds
# =============================================================================


class QualityThresholds(BaseModel):
    """Metadata thresholds applied after flagging.

    ``count_max`` of None disables the upper individual-count bound so large
    legitimate counts (flocks, schools) are kept.
    """

    uncertainty_threshold_km: float = Field(default=100.0, gt=0)
    accepted_basis: frozenset[str] = frozenset({BasisOfRecord.HUMAN_OBSERVATION.value})
    count_min: int = 0
    count_max: int | None = None

    @field_validator("accepted_basis", mode="before")
    @classmethod
    def _upper_basis(cls, value: Any) -> frozenset[str]:
        if isinstance(value, str):
            value = [value]
        return frozenset(str(v).strip().upper() for v in value)

    @model_validator(mode="after")
    def _check_count_bounds(self) -> QualityThresholds:
        if self.count_max is not None and self.count_max <= self.count_min:
            msg = f"count_max ({self.count_max}) must be greater than count_min ({self.count_min})"
            raise ValueError(msg)
        return self

    @property
    def uncertainty_threshold_m(self) -> float:
        return self.uncertainty_threshold_km * 1000.0


class RunConfig(BaseModel):
    """Everything one cleaning run needs."""

    species: str
    limit: int = Field(default=5000, gt=0)
    require_coords: bool = True
    tests: tuple[FlagTest, ...] = ALL_TESTS
    radii: FlagRadii = Field(default_factory=FlagRadii)
    thresholds: QualityThresholds = Field(default_factory=QualityThresholds)
    fill_missing_columns: bool = False

    @field_validator("species")
    @classmethod
    def _strip_species(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "species must not be empty"
            raise ValueError(msg)
        return value

    @property
    def slug(self) -> str:
        """Filesystem-safe identifier for this taxon's outputs."""
        return "_".join(self.species.lower().split())
