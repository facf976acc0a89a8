"""
Prefect flows for the cleaning pipeline.

Flows:
- clean: Fetch GBIF occurrences (or reuse the raw cache), clean, save tables
- report: Render figures, flag summary and Leaflet map into index.html

Usage (local):
    python -m occurrence_cleaner.flows.clean "Panthera onca"
    python -m occurrence_cleaner.flows.report "Panthera onca"

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    occurrence-cleaner run --species "Panthera onca"
"""
