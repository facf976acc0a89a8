"""Pure rendering functions: cleaned tables -> figures and HTML.

All renderers follow the same pattern:
  - Input: DataFrame, list of row dicts, or summary dict
  - Output: ``matplotlib.figure.Figure`` or str (HTML fragment, not a full page)
  - No side effects, no I/O, no Prefect decorators, no pyplot global state

Used by flows/report.py which assembles the report page.

Public API:
  - plots: build_occurrence_scatter, build_bounding_box_map,
    build_year_histogram, figure_to_data_uri
  - occurrence_map: build_occurrence_map_html
  - flag_summary: build_flag_summary_html

Adding a renderer
-----------------
1. Create ``renderers/{name}.py`` with a build function::

       from occurrence_cleaner.renderers import render_template

       def build_mywidget_html(data: dict[str, Any]) -> str:
           rows = [...]
           return render_template("mywidget.html.j2", rows=rows)

2. Create a Jinja2 template in ``templates/{name}.html.j2``. Templates
   produce HTML fragments; page CSS lives in ``templates/report.html.j2``.

3. Wire into ``flows/report.py``: call the build function in
   ``build_html()`` and pass the result to ``render_template("report.html.j2", ...)``.

4. Add tests: call your build function with sample data and assert the
   returned HTML contains expected content.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
