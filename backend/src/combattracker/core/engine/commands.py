# backend/src/combattracker/core/engine/commands.py

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from combattracker.core.engine.state import InitiativeEntry


class CommandBase(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: str


class StartCombat(CommandBase):
    type: Literal["StartCombat"] = "StartCombat"
    order: list[InitiativeEntry]


class AdvanceTurn(CommandBase):
    type: Literal["AdvanceTurn"] = "AdvanceTurn"


class RetreatTurn(CommandBase):
    type: Literal["RetreatTurn"] = "RetreatTurn"


class PauseCombat(CommandBase):
    type: Literal["PauseCombat"] = "PauseCombat"


class ResumeCombat(CommandBase):
    type: Literal["ResumeCombat"] = "ResumeCombat"


class EndCombat(CommandBase):
    type: Literal["EndCombat"] = "EndCombat"


class MarkActed(CommandBase):
    type: Literal["MarkActed"] = "MarkActed"
    participant_id: str


class SetInitiative(CommandBase):
    type: Literal["SetInitiative"] = "SetInitiative"
    participant_id: str
    initiative: int
    tiebreak: Optional[int] = None  # None = keep the current value


class RemoveFromOrder(CommandBase):
    type: Literal["RemoveFromOrder"] = "RemoveFromOrder"
    participant_id: str


Command = Annotated[
    Union[
        StartCombat,
        AdvanceTurn,
        RetreatTurn,
        PauseCombat,
        ResumeCombat,
        EndCombat,
        MarkActed,
        SetInitiative,
        RemoveFromOrder,
    ],
    Field(discriminator="type"),
]
