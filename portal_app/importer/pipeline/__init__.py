"""Import pipelines, one per data domain."""

from __future__ import annotations

from .alumni import import_alumni
from .base import ImportSummary, UpsertPlan, commit_import, import_pipeline, is_blank_row
from .chapters import import_chapters
from .eoy import import_end_of_year
from .history import import_history
from .pia import import_pia
from .roster import import_roster

# CLI / API name -> pipeline callable.
PIPELINES = {
    "chapters": import_chapters,
    "eoy": import_end_of_year,
    "history": import_history,
    "pia": import_pia,
    "roster": import_roster,
    "alumni": import_alumni,
}

__all__ = [
    "PIPELINES",
    "ImportSummary",
    "UpsertPlan",
    "commit_import",
    "import_pipeline",
    "is_blank_row",
    "import_alumni",
    "import_chapters",
    "import_end_of_year",
    "import_history",
    "import_pia",
    "import_roster",
]
