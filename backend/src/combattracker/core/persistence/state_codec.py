from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import TypeAdapter, ValidationError

from combattracker.core.engine.rules.validator import validate_combat_state
from combattracker.core.engine.state import CombatState

logger = logging.getLogger(__name__)

_STATE_ADAPTER = TypeAdapter(CombatState)


def combat_state_to_dict(state: CombatState) -> Dict[str, Any]:
    """JSON-friendly dict: timestamps as ISO strings, order as a list."""
    return state.model_dump(mode="json")


def combat_state_from_dict(data: Any) -> Optional[CombatState]:
    """
    Rebuild a CombatState from stored data.
    Returns None when the payload is malformed or breaks a state invariant;
    the caller decides whether to fall back to a fresh state.
    """
    if not isinstance(data, dict):
        logger.warning("stored combat state is not a mapping: %r", type(data).__name__)
        return None

    try:
        state = _STATE_ADAPTER.validate_python(data)
    except ValidationError as e:
        logger.warning("stored combat state has invalid structure: %s", e)
        return None

    vr = validate_combat_state(state)
    if not vr.ok:
        logger.warning(
            "stored combat state is inconsistent: %s",
            ", ".join(err.code for err in vr.errors),
        )
        return None

    return state
