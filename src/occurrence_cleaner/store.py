"""Data store for raw fetches and derived tables.

Two tiers under one base directory:
  - raw/: GBIF search results, JSON with a metadata envelope and a
    ``valid_until`` TTL so a re-run inside the window skips the network.
  - derived/: Cleaned tables (CSV) and the rendered report, always rewritten.

Tables use a sidecar ``.meta.json`` so the CSV stays a plain CSV and the
freshness metadata lives alongside it.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003
from typing import Any

import pandas as pd

from occurrence_cleaner.cleaning.projection import OCCURRENCE_COLUMNS


class DataStore:
    """Manages read/write of cached fetches and output tables."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.raw = base_dir / "raw"
        self.derived = base_dir / "derived"

    # -- JSON envelopes ------------------------------------------------------

    def read(self, path: Path) -> Any | None:
        """Read the ``data`` payload of an enveloped JSON file, or None if missing."""
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``raw/panthera_onca.json``).
            data: JSON-serializable payload stored under ``data``.
            source: Data source identifier (e.g. ``"api.gbif.org"``).
            valid_until: Expiry timestamp. None means never fresh.
            **params: Extra metadata fields (species, limit, ...).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        envelope = {"meta": self._meta(source, valid_until, params), "data": data}
        with full.open("w") as f:
            json.dump(envelope, f, indent=2, default=str)
        return full

    # -- Tables --------------------------------------------------------------

    def write_table(
        self,
        path: Path,
        df: pd.DataFrame,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write a DataFrame as CSV with a sidecar ``.meta.json``."""
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(full, index=False)

        meta = self._meta(source, valid_until, params)
        meta["rows"] = len(df)
        with self._sidecar(full).open("w") as f:
            json.dump({"meta": meta}, f, indent=2, default=str)
        return full

    def read_table(self, path: Path) -> pd.DataFrame | None:
        """Read a CSV table written by ``write_table``, or None if missing.

        Only empty cells are nulls; literal strings such as ``NA`` stay strings.
        """
        full = self._resolve(path)
        if not full.exists():
            return None
        df = pd.read_csv(full, keep_default_na=False, na_values=[""], dtype={"gbifID": str})
        for col in ("individualCount", "year"):
            if col in df.columns:
                df[col] = df[col].astype("Int64")
        for col in OCCURRENCE_COLUMNS:
            if col in df.columns and df[col].dtype == object:
                df[col] = df[col].astype("string")
        return df

    # -- Freshness -----------------------------------------------------------

    def is_fresh(self, path: Path) -> bool:
        """Check if a file exists and hasn't expired.

        Returns False if the file is missing, has no ``valid_until``, or the
        expiry time has passed.
        """
        full = self._resolve(path)
        if not full.exists():
            return False

        valid_until = self._read_meta(full).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) < expiry

    def read_meta(self, path: Path) -> dict[str, Any]:
        """Metadata of a stored file (envelope or sidecar); empty if missing."""
        return self._read_meta(self._resolve(path))

    # -- Internals -----------------------------------------------------------

    @staticmethod
    def _meta(source: str, valid_until: datetime | None, params: dict[str, Any]) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()
        meta.update(params)
        return meta

    @staticmethod
    def _sidecar(full: Path) -> Path:
        return full.with_suffix(full.suffix + ".meta.json")

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    def _read_meta(self, full: Path) -> dict[str, Any]:
        sidecar = self._sidecar(full)
        if sidecar.exists():
            with sidecar.open() as f:
                result: dict[str, Any] = json.load(f)
            return result.get("meta", {})

        if full.suffix == ".json" and full.exists():
            with full.open() as f:
                envelope: dict[str, Any] = json.load(f)
            return envelope.get("meta", {})

        return {}
