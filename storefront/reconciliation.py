"""
Réconciliation Stripe / base locale.

Quand Stripe a déjà appliqué un effet mais que l'écriture locale échoue, l'écart
est décrit par un ReconciliationEvent puis transmis au hook injecté. Le hook par
défaut se contente de journaliser; la correction est faite hors ligne.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class ReconciliationKind(str, enum.Enum):
    ORPHAN_CUSTOMER = "orphan_customer"
    ORPHAN_ATTACHED_METHOD = "orphan_attached_method"
    ORPHAN_DETACHED_METHOD = "orphan_detached_method"
    CHARGE_WITHOUT_PURCHASE = "charge_without_purchase"


@dataclass(frozen=True)
class ReconciliationEvent:
    kind: ReconciliationKind
    user_id: int
    processor_ref: str
    context: Dict[str, Any] = field(default_factory=dict)


class ReconciliationHook(Protocol):
    def report(self, event: ReconciliationEvent) -> None:
        ...


class LoggingReconciliationHook:
    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def report(self, event: ReconciliationEvent) -> None:
        self.log.error(
            "reconciliation required kind=%s user_id=%s processor_ref=%s context=%s",
            event.kind.value,
            event.user_id,
            event.processor_ref,
            event.context,
        )
