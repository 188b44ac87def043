from .initiative_view import (
    InitiativeRow,
    annotate_rows,
    initiative_display,
    initiative_view,
)
from .roster import build_roster_index, find_participant

__all__ = [
    "InitiativeRow",
    "annotate_rows",
    "initiative_display",
    "initiative_view",
    "build_roster_index",
    "find_participant",
]
