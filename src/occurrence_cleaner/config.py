"""
Application settings.

Values come from ``OCCURRENCE_CLEANER_*`` environment variables or a local
``.env`` file. Numeric thresholds are policy choices, not constants: override
them per taxon instead of editing code.

Usage::

    from occurrence_cleaner.config import get_settings

    settings = get_settings()
    config = settings.run_config("Panthera onca")
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from occurrence_cleaner.schemas import (
    ALL_TESTS,
    FlagRadii,
    FlagTest,
    QualityThresholds,
    RunConfig,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OCCURRENCE_CLEANER_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "occurrence-cleaner"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    data_dir: Path = Path("data")
    api_port: int = 8000

    # Fetch
    species: str | None = None
    limit: int = Field(default=5000, gt=0)
    require_coords: bool = True
    http_timeout: float = 30.0
    cache_ttl_hours: float = 24.0
    fill_missing_columns: bool = False

    # Flagger
    flag_tests: list[FlagTest] = Field(default_factory=lambda: list(ALL_TESTS))
    capitals_radius_km: float = 10.0
    centroids_radius_km: float = 1.0
    institutions_radius_km: float = 0.1
    gbif_radius_km: float = 1.0
    zeros_radius_deg: float = 0.5
    equal_absolute: bool = False

    # Quality filter
    uncertainty_threshold_km: float = 100.0
    accepted_basis: set[str] = Field(default_factory=lambda: {"HUMAN_OBSERVATION"})
    count_min: int = 0
    count_max: int | None = None

    def radii(self) -> FlagRadii:
        return FlagRadii(
            capitals_km=self.capitals_radius_km,
            centroids_km=self.centroids_radius_km,
            institutions_km=self.institutions_radius_km,
            gbif_km=self.gbif_radius_km,
            zeros_deg=self.zeros_radius_deg,
            equal_absolute=self.equal_absolute,
        )

    def thresholds(self) -> QualityThresholds:
        return QualityThresholds(
            uncertainty_threshold_km=self.uncertainty_threshold_km,
            accepted_basis=frozenset(self.accepted_basis),
            count_min=self.count_min,
            count_max=self.count_max,
        )

    def run_config(
        self,
        species: str | None = None,
        limit: int | None = None,
        require_coords: bool | None = None,
    ) -> RunConfig:
        """Build a RunConfig, with explicit arguments taking precedence."""
        name = species or self.species
        if not name:
            msg = "No species given (pass one or set OCCURRENCE_CLEANER_SPECIES)"
            raise ValueError(msg)
        return RunConfig(
            species=name,
            limit=limit if limit is not None else self.limit,
            require_coords=self.require_coords if require_coords is None else require_coords,
            tests=tuple(self.flag_tests),
            radii=self.radii(),
            thresholds=self.thresholds(),
            fill_missing_columns=self.fill_missing_columns,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
