"""
Ledger Events

Immutable representation of what the ledger delivers to a subscribed party:
transactions, each an ordered batch of created/archived contract events.
Uses Pydantic v2 for validation and immutability.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Kind of contract event observed on the ledger"""
    CREATED = "created"
    ARCHIVED = "archived"


class TemplateId(BaseModel):
    """
    Template Identifier Value Object

    A ledger template is addressed as ``<package>:<Module>:<Entity>``. The package
    part is a hash (or ``#package-name`` reference) that changes with every upload,
    so template ids are compared on ``qualified_name`` (module and entity) only.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    package_id: Optional[str] = Field(None, description="Package hash or #name reference")
    module_name: str = Field(..., min_length=1, description="Dotted module name")
    entity_name: str = Field(..., min_length=1, description="Template entity name")

    @classmethod
    def parse(cls, value: str) -> "TemplateId":
        """
        Parse a template id string

        Args:
            value: ``pkg:Module:Entity`` or ``Module:Entity``

        Returns:
            TemplateId

        Raises:
            ValueError: If the string has neither two nor three parts
        """
        parts = value.split(":")
        if len(parts) == 3:
            return cls(package_id=parts[0] or None, module_name=parts[1], entity_name=parts[2])
        if len(parts) == 2:
            return cls(module_name=parts[0], entity_name=parts[1])
        raise ValueError(f"Invalid template id: {value!r}")

    @property
    def qualified_name(self) -> str:
        return f"{self.module_name}:{self.entity_name}"

    def __str__(self) -> str:
        if self.package_id:
            return f"{self.package_id}:{self.qualified_name}"
        return self.qualified_name


class LedgerEvent(BaseModel):
    """
    A single contract event visible to the subscribed party.

    Created events carry the contract arguments as ``payload``; archived
    events carry an empty payload.
    """

    model_config = ConfigDict(frozen=True)

    kind: EventKind = Field(..., description="Created or archived")
    contract_id: str = Field(..., min_length=1, description="Ledger contract id")
    template_id: TemplateId = Field(..., description="Template of the contract")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Contract arguments")

    @classmethod
    def created(cls, template_id: TemplateId, contract_id: str, payload: Dict[str, Any]) -> "LedgerEvent":
        return cls(kind=EventKind.CREATED, contract_id=contract_id, template_id=template_id, payload=payload)

    @classmethod
    def archived(cls, template_id: TemplateId, contract_id: str) -> "LedgerEvent":
        return cls(kind=EventKind.ARCHIVED, contract_id=contract_id, template_id=template_id)

    @property
    def is_created(self) -> bool:
        return self.kind == EventKind.CREATED


class LedgerTransaction(BaseModel):
    """A committed ledger transaction flattened to its events, in ledger order"""

    model_config = ConfigDict(frozen=True)

    transaction_id: str = Field(..., min_length=1, description="Ledger update id")
    offset: str = Field(..., min_length=1, description="Ledger offset of this transaction")
    effective_at: Optional[datetime] = Field(None, description="Ledger effective time")
    events: Tuple[LedgerEvent, ...] = Field(default_factory=tuple, description="Events in delivery order")
