from __future__ import annotations

from typing import Dict, Iterable, Optional

from combattracker.core.engine.state import Participant


def build_roster_index(participants: Iterable[Participant]) -> Dict[str, Participant]:
    # ids are stringified so int/str ids from different sources still match
    return {str(p.id): p for p in participants}


def find_participant(
    participants: Iterable[Participant], participant_id: str
) -> Optional[Participant]:
    return build_roster_index(participants).get(str(participant_id))
