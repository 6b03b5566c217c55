"""genremap domain models: re-exports all public model classes.

    - genre.py  : GenreRecord (listing item / enriched record) and GenreDetail
    - report.py : DispatchReport and RunReport run summaries
"""

from __future__ import annotations

from genremap.models.genre import WEIGHTED_PAIRS, GenreDetail, GenreRecord
from genremap.models.report import DispatchReport, RunReport

__all__ = [
    "WEIGHTED_PAIRS",
    "DispatchReport",
    "GenreDetail",
    "GenreRecord",
    "RunReport",
]
