"""
Ledger Commands

Commands a party can submit to the ledger. Only used by integration-level
callers (market setup, tests); the event pipeline itself never submits.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from pistebot.domain.events.ledger_events import TemplateId


class LedgerCommand(BaseModel):
    """Base class for ledger commands"""

    model_config = ConfigDict(frozen=True)

    template_id: TemplateId = Field(..., description="Template the command targets")


class CreateCommand(LedgerCommand):
    """Create a contract of ``template_id`` with the given arguments"""

    arguments: Dict[str, Any] = Field(default_factory=dict, description="Contract arguments")


class ExerciseCommand(LedgerCommand):
    """Exercise ``choice`` on an existing contract"""

    contract_id: str = Field(..., min_length=1)
    choice: str = Field(..., min_length=1)
    argument: Dict[str, Any] = Field(default_factory=dict, description="Choice argument record")
