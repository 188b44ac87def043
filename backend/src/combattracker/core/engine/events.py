from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class EventEnvelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    event_id: UUID = Field(default_factory=uuid4)
    type: str
    at: Optional[datetime] = None

    round: int
    turn: int
    actor_id: Optional[str] = None

    payload: dict[str, Any] = Field(default_factory=dict)


def ev_command_rejected(
    *,
    at: Optional[datetime],
    round_: int,
    turn: int,
    actor_id: Optional[str],
    command: dict,
    code: str,
    message: str,
    meta: dict,
) -> EventEnvelope:
    return EventEnvelope(
        type="CommandRejected",
        at=at,
        round=round_,
        turn=turn,
        actor_id=actor_id,
        payload={
            "command": command,
            "code": code,
            "message": message,
            "meta": meta,
        },
    )


def ev_combat_started(
    *, at: Optional[datetime], round_: int, order: list[dict]
) -> EventEnvelope:
    # order: [{"participant_id": "...", "initiative": 12, "tiebreak": 14}, ...]
    return EventEnvelope(
        type="CombatStarted",
        at=at,
        round=round_,
        turn=0,
        payload={"participant_count": len(order), "order": order},
    )


def ev_combat_ended(
    *,
    at: Optional[datetime],
    round_: int,
    turn: int,
    total_rounds: int,
    total_duration: int,
) -> EventEnvelope:
    return EventEnvelope(
        type="CombatEnded",
        at=at,
        round=round_,
        turn=turn,
        payload={"total_rounds": total_rounds, "total_duration": total_duration},
    )


def ev_combat_paused(
    *, at: Optional[datetime], round_: int, turn: int
) -> EventEnvelope:
    return EventEnvelope(type="CombatPaused", at=at, round=round_, turn=turn)


def ev_combat_resumed(
    *, at: Optional[datetime], round_: int, turn: int, paused_seconds: int
) -> EventEnvelope:
    return EventEnvelope(
        type="CombatResumed",
        at=at,
        round=round_,
        turn=turn,
        payload={"paused_seconds": paused_seconds},
    )


def ev_turn_started(
    *, at: Optional[datetime], round_: int, turn: int, participant_id: str
) -> EventEnvelope:
    return EventEnvelope(
        type="TurnStarted",
        at=at,
        round=round_,
        turn=turn,
        actor_id=participant_id,
        payload={"participant_id": participant_id},
    )


def ev_turn_ended(
    *, at: Optional[datetime], round_: int, turn: int, participant_id: str
) -> EventEnvelope:
    return EventEnvelope(
        type="TurnEnded",
        at=at,
        round=round_,
        turn=turn,
        actor_id=participant_id,
        payload={"participant_id": participant_id},
    )


def ev_turn_retreated(
    *,
    at: Optional[datetime],
    round_: int,
    turn: int,
    from_round: int,
    from_turn: int,
    participant_id: str,
) -> EventEnvelope:
    return EventEnvelope(
        type="TurnRetreated",
        at=at,
        round=round_,
        turn=turn,
        actor_id=participant_id,
        payload={
            "participant_id": participant_id,
            "from_round": from_round,
            "from_turn": from_turn,
        },
    )


def ev_round_ended(*, at: Optional[datetime], round_: int, turn: int) -> EventEnvelope:
    return EventEnvelope(
        type="RoundEnded", at=at, round=round_, turn=turn, payload={"round": round_}
    )


def ev_round_started(
    *, at: Optional[datetime], round_: int, turn: int
) -> EventEnvelope:
    return EventEnvelope(
        type="RoundStarted", at=at, round=round_, turn=turn, payload={"round": round_}
    )


def ev_participant_acted(
    *, at: Optional[datetime], round_: int, turn: int, participant_id: str
) -> EventEnvelope:
    return EventEnvelope(
        type="ParticipantActed",
        at=at,
        round=round_,
        turn=turn,
        actor_id=participant_id,
        payload={"participant_id": participant_id},
    )


def ev_initiative_set(
    *,
    at: Optional[datetime],
    round_: int,
    turn: int,
    participant_id: str,
    initiative: int,
    tiebreak: int,
    order: list[str],
) -> EventEnvelope:
    return EventEnvelope(
        type="InitiativeSet",
        at=at,
        round=round_,
        turn=turn,
        actor_id=participant_id,
        payload={
            "participant_id": participant_id,
            "initiative": initiative,
            "tiebreak": tiebreak,
            "order": order,
        },
    )


def ev_participant_removed_from_order(
    *, at: Optional[datetime], round_: int, turn: int, participant_id: str, index: int
) -> EventEnvelope:
    return EventEnvelope(
        type="ParticipantRemovedFromOrder",
        at=at,
        round=round_,
        turn=turn,
        actor_id=participant_id,
        payload={"participant_id": participant_id, "index": index},
    )
