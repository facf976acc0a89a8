"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, error translation
    └── {feature}.py      # Fetch functions (one per endpoint/concept)

Fetch functions return DataFrames or pydantic models and raise
``SourceUnavailable`` / ``QuotaExceeded`` on failure; they never return
partial data silently.
"""
