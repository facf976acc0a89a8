"""Static reference data for coordinate validation.

Lookup tables that don't change with API calls: country codes, capital
cities, country centroids, institution locations, and the GBIF
headquarters coordinate.

Adding a new table:
1. Drop a CSV in ``reference/data/``
2. Add a loader in ``reference/{name}.py`` returning ``iso3, lon, lat`` columns
3. Re-export from this ``__init__.py``
"""

from occurrence_cleaner.reference.countries import ISO2_TO_ISO3 as ISO2_TO_ISO3
from occurrence_cleaner.reference.countries import capitals as capitals
from occurrence_cleaner.reference.countries import centroids as centroids
from occurrence_cleaner.reference.countries import to_iso3 as to_iso3
from occurrence_cleaner.reference.gbif import GBIF_HQ as GBIF_HQ
from occurrence_cleaner.reference.institutions import institutions as institutions
