"""
Data models for Bill Splitter
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

# Prices and amounts arrive either already parsed or as the raw text a user typed.
MoneyInput = Union[Decimal, int, float, str, None]


@dataclass
class Person:
    """Someone sharing the bill"""
    id: str
    name: str
    color: str = ""


@dataclass
class Share:
    """Fractional ownership of one item"""
    person_id: str
    percentage: Union[float, int, str, Decimal]  # 0-100


@dataclass
class Item:
    """Single receipt line"""
    id: str
    name: str
    price: MoneyInput
    shares: List[Share] = field(default_factory=list)

    @property
    def is_assigned(self) -> bool:
        return len(self.shares) > 0


@dataclass
class BillAdjustments:
    """Bill-level numbers as printed on (or edited from) the receipt"""
    tax_rate: MoneyInput = 0  # fraction, e.g. 0.08
    tax_amount: MoneyInput = 0
    discount: MoneyInput = 0
    tip: MoneyInput = 0
    service_charge: MoneyInput = 0
    receipt_subtotal: MoneyInput = 0
    payer_id: Optional[str] = None
    total: MoneyInput = 0


@dataclass
class Bill:
    """Complete snapshot handed to the engine"""
    people: List[Person]
    items: List[Item]
    adjustments: BillAdjustments = field(default_factory=BillAdjustments)
    title: str = ""
    receipt_path: str = ""


class ReconciliationStatus(str, Enum):
    INCOMPLETE = "incomplete"
    BALANCED = "balanced"
    MISMATCHED = "mismatched"


class MismatchDirection(str, Enum):
    OVER = "over"  # assigned items exceed the receipt subtotal
    UNDER = "under"


@dataclass(frozen=True)
class Reconciliation:
    """Consistency verdict for the current assignments"""
    status: ReconciliationStatus
    assigned_total: Decimal
    unassigned_total: Decimal
    all_items_total: Decimal
    receipt_subtotal: Decimal
    assigned_item_count: int
    unassigned_item_count: int
    difference: Decimal = Decimal("0.00")
    direction: Optional[MismatchDirection] = None
    all_items_match_subtotal: bool = False

    @property
    def message(self) -> str:
        if self.status is ReconciliationStatus.INCOMPLETE:
            return "Some items are unassigned"
        if self.status is ReconciliationStatus.BALANCED:
            return "All items assigned and totals match"
        return "Totals don't match - check item prices"


@dataclass(frozen=True)
class PersonBreakdown:
    """One person's share of the bill"""
    person_id: str
    name: str
    item_count: int
    subtotal: Decimal
    tax_share: Decimal
    discount_share: Decimal
    tip_share: Decimal
    service_charge_share: Decimal
    total: Decimal
    is_payer: bool = False


@dataclass(frozen=True)
class AllocationResult:
    """Per-person breakdown plus bill-wide totals"""
    breakdowns: List[PersonBreakdown]
    assigned_total: Decimal
    unassigned_total: Decimal
    all_items_total: Decimal
    reconciliation: Reconciliation

    @property
    def reconciliation_status(self) -> ReconciliationStatus:
        return self.reconciliation.status

    def active_breakdowns(self) -> List[PersonBreakdown]:
        """People with at least one item, i.e. the ones worth showing"""
        return [b for b in self.breakdowns if b.item_count > 0]

    def breakdown_for(self, person_id: str) -> Optional[PersonBreakdown]:
        for b in self.breakdowns:
            if b.person_id == person_id:
                return b
        return None


@dataclass(frozen=True)
class RecalculatedTotals:
    """Bill-level figures after a direct edit"""
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    discount: Decimal
    tip: Decimal
    service_charge: Decimal
    total: Decimal
