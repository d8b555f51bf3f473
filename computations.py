"""
Business logic and computations for Bill Splitter.

Everything here is a pure function of the snapshot passed in: items,
people and bill adjustments go in, a fresh result comes out, and the
inputs are never mutated.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, List, Optional

from models import (
    AllocationResult,
    Bill,
    BillAdjustments,
    Item,
    MismatchDirection,
    Person,
    PersonBreakdown,
    Reconciliation,
    ReconciliationStatus,
    RecalculatedTotals,
)
from utils import CENT, ZERO, parse_money, parse_percentage, parse_rate, round_cents

logger = logging.getLogger(__name__)

UNKNOWN_PAYER = "Unknown User"


# ---------- Share model ----------

@dataclass(frozen=True)
class NormalizedItem:
    """Item with price and share percentages parsed once"""
    item: Item
    price: Decimal
    percentages: Dict[str, Decimal]

    @property
    def is_assigned(self) -> bool:
        return self.item.is_assigned


def normalize_items(items: List[Item]) -> List[NormalizedItem]:
    """Parse prices and percentages, coercing anything malformed to 0"""
    out = []
    for item in items:
        price = parse_money(item.price, f"price of item {item.id!r}")
        percentages: Dict[str, Decimal] = {}
        for share in item.shares:
            if share.person_id in percentages:
                # one share per person; the first one wins
                continue
            percentages[share.person_id] = parse_percentage(
                share.percentage, f"share of {share.person_id!r} in item {item.id!r}"
            )
        out.append(NormalizedItem(item, price, percentages))
    return out


def _sum_prices(normalized: List[NormalizedItem]) -> Decimal:
    return round_cents(sum((n.price for n in normalized), ZERO))


def all_items_total(items: List[Item]) -> Decimal:
    """Sum of every item's price"""
    return _sum_prices(normalize_items(items))


def assigned_total(items: List[Item]) -> Decimal:
    """Sum of prices of items that have at least one share"""
    return _sum_prices([n for n in normalize_items(items) if n.is_assigned])


def unassigned_total(items: List[Item]) -> Decimal:
    normalized = normalize_items(items)
    return _sum_prices(normalized) - _sum_prices([n for n in normalized if n.is_assigned])


def unassigned_items(items: List[Item]) -> List[Item]:
    return [item for item in items if not item.is_assigned]


# ---------- Per-person allocation ----------

def _person_subtotal(normalized: List[NormalizedItem], person_id: str) -> Decimal:
    # round once after the full sum so per-person figures add up like the aggregates
    raw = sum(
        (n.price * n.percentages[person_id] / 100 for n in normalized if person_id in n.percentages),
        Decimal(0),
    )
    return round_cents(raw)


def _person_item_count(normalized: List[NormalizedItem], person_id: str) -> int:
    return sum(1 for n in normalized if n.percentages.get(person_id, 0) > 0)


def person_subtotal(items: List[Item], person_id: str) -> Decimal:
    """Sum of price * percentage/100 over the items this person shares"""
    return _person_subtotal(normalize_items(items), person_id)


def person_item_count(items: List[Item], person_id: str) -> int:
    """Number of items in which the person holds a non-zero share"""
    return _person_item_count(normalize_items(items), person_id)


@dataclass(frozen=True)
class AllocationBasis:
    """Bill-wide figures a strategy needs besides the person's own numbers"""
    all_items_total: Decimal
    active_people: int


class AllocationStrategy:
    """How one bill-level amount is divided between people"""
    name = ""

    def share(self, amount: Decimal, subtotal: Decimal, item_count: int, basis: AllocationBasis) -> Decimal:
        raise NotImplementedError


class ProportionalAllocation(AllocationStrategy):
    """
    Divide by each person's dollar share of ALL items, assigned or not.
    Unassigned items stay in the base, so assigning them shifts the
    burden predictably.
    """
    name = "proportional"

    def share(self, amount, subtotal, item_count, basis):
        if amount == 0 or basis.all_items_total == 0:
            return ZERO
        return round_cents(subtotal / basis.all_items_total * amount)


class EqualSplitAllocation(AllocationStrategy):
    """Divide evenly between everyone with at least one item"""
    name = "equal_split"

    def share(self, amount, subtotal, item_count, basis):
        if amount == 0 or item_count == 0 or basis.active_people == 0:
            return ZERO
        return round_cents(amount / basis.active_people)


PROPORTIONAL = ProportionalAllocation()
EQUAL_SPLIT = EqualSplitAllocation()

# tax and discount follow the transaction; tip and service charge are per head
DEFAULT_STRATEGIES: Dict[str, AllocationStrategy] = {
    "tax_amount": PROPORTIONAL,
    "discount": PROPORTIONAL,
    "tip": EQUAL_SPLIT,
    "service_charge": EQUAL_SPLIT,
}


def _adjustment_amounts(adj: BillAdjustments) -> Dict[str, Decimal]:
    return {
        "tax_amount": parse_money(adj.tax_amount, "tax amount"),
        "discount": parse_money(adj.discount, "discount"),
        "tip": parse_money(adj.tip, "tip"),
        "service_charge": parse_money(adj.service_charge, "service charge"),
    }


def allocate(
    items: List[Item],
    people: List[Person],
    adjustments: BillAdjustments,
    strategies: Optional[Dict[str, AllocationStrategy]] = None,
) -> AllocationResult:
    """
    Compute every person's breakdown plus the bill-wide totals and the
    reconciliation verdict. People without items are included with zero
    amounts; use AllocationResult.active_breakdowns() for the ones to show.
    """
    strategies = {**DEFAULT_STRATEGIES, **(strategies or {})}
    normalized = normalize_items(items)
    amounts = _adjustment_amounts(adjustments)

    all_total = _sum_prices(normalized)
    counts = {p.id: _person_item_count(normalized, p.id) for p in people}
    basis = AllocationBasis(
        all_items_total=all_total,
        active_people=sum(1 for c in counts.values() if c > 0),
    )

    breakdowns = []
    for p in people:
        subtotal = _person_subtotal(normalized, p.id)
        shares = {
            key: strategies[key].share(amount, subtotal, counts[p.id], basis)
            for key, amount in amounts.items()
        }
        total = round_cents(
            subtotal
            + shares["tax_amount"]
            - shares["discount"]
            + shares["tip"]
            + shares["service_charge"]
        )
        breakdowns.append(PersonBreakdown(
            person_id=p.id,
            name=p.name,
            item_count=counts[p.id],
            subtotal=subtotal,
            tax_share=shares["tax_amount"],
            discount_share=shares["discount"],
            tip_share=shares["tip"],
            service_charge_share=shares["service_charge"],
            total=total,
            is_payer=adjustments.payer_id is not None and p.id == adjustments.payer_id,
        ))

    recon = _reconcile(normalized, adjustments.receipt_subtotal)
    logger.debug(
        "Allocated %d items across %d people (%d active), status=%s",
        len(items), len(people), basis.active_people, recon.status.value,
    )
    return AllocationResult(
        breakdowns=breakdowns,
        assigned_total=recon.assigned_total,
        unassigned_total=recon.unassigned_total,
        all_items_total=all_total,
        reconciliation=recon,
    )


def compute_allocation(bill: Bill, strategies: Optional[Dict[str, AllocationStrategy]] = None) -> AllocationResult:
    """Allocate a whole bill snapshot"""
    return allocate(bill.items, bill.people, bill.adjustments, strategies)


# ---------- Reconciliation ----------

def _reconcile(normalized: List[NormalizedItem], receipt_subtotal) -> Reconciliation:
    assigned = [n for n in normalized if n.is_assigned]
    all_total = _sum_prices(normalized)
    assigned_sum = _sum_prices(assigned)
    receipt = parse_money(receipt_subtotal, "receipt subtotal")
    unassigned_count = len(normalized) - len(assigned)

    common = dict(
        assigned_total=assigned_sum,
        unassigned_total=all_total - assigned_sum,
        all_items_total=all_total,
        receipt_subtotal=receipt,
        assigned_item_count=len(assigned),
        unassigned_item_count=unassigned_count,
        all_items_match_subtotal=abs(all_total - receipt) < CENT,
    )
    if unassigned_count > 0:
        return Reconciliation(status=ReconciliationStatus.INCOMPLETE, **common)

    difference = assigned_sum - receipt
    if abs(difference) < CENT:
        return Reconciliation(status=ReconciliationStatus.BALANCED, **common)

    logger.info("Assigned items total %s but receipt subtotal is %s", assigned_sum, receipt)
    return Reconciliation(
        status=ReconciliationStatus.MISMATCHED,
        difference=difference,
        direction=MismatchDirection.OVER if difference > 0 else MismatchDirection.UNDER,
        **common,
    )


def check_reconciliation(items: List[Item], receipt_subtotal) -> Reconciliation:
    """
    Classify the assignment state:
    incomplete if any item is unassigned, otherwise balanced when the
    assigned total is within a cent of the receipt subtotal, else mismatched.
    """
    return _reconcile(normalize_items(items), receipt_subtotal)


def sync_receipt_subtotal(bill: Bill) -> Bill:
    """Return a copy of the bill whose receipt subtotal equals the assigned items total"""
    adj = replace(bill.adjustments, receipt_subtotal=assigned_total(bill.items))
    return replace(bill, adjustments=adj)


# ---------- Total recalculation ----------

def recalculate_totals(subtotal, tax_rate, discount=0, tip=0, service_charge=0) -> RecalculatedTotals:
    """
    Derive tax and total from directly edited bill-level numbers.
    tax = subtotal * rate; total = subtotal + tax - discount + tip + service charge
    """
    sub = parse_money(subtotal, "subtotal")
    rate = parse_rate(tax_rate)
    disc = parse_money(discount, "discount")
    tip_amount = parse_money(tip, "tip")
    service = parse_money(service_charge, "service charge")

    tax = round_cents(sub * rate)
    total = round_cents(sub + tax - disc + tip_amount + service)
    return RecalculatedTotals(
        subtotal=sub,
        tax_rate=rate,
        tax_amount=tax,
        discount=disc,
        tip=tip_amount,
        service_charge=service,
        total=total,
    )


def apply_recalculated_totals(bill: Bill, totals: Optional[RecalculatedTotals] = None) -> Bill:
    """
    Return a copy of the bill with its adjustments replaced by recalculated
    figures. Without explicit totals the bill's own fields are recalculated.
    """
    if totals is None:
        adj = bill.adjustments
        totals = recalculate_totals(adj.receipt_subtotal, adj.tax_rate, adj.discount, adj.tip, adj.service_charge)
    adj = replace(
        bill.adjustments,
        receipt_subtotal=totals.subtotal,
        tax_rate=totals.tax_rate,
        tax_amount=totals.tax_amount,
        discount=totals.discount,
        tip=totals.tip,
        service_charge=totals.service_charge,
        total=totals.total,
    )
    return replace(bill, adjustments=adj)


def bill_total(adjustments: BillAdjustments) -> Decimal:
    """
    The stored total, or when none was stored, the total the allocator's
    figures add up to: subtotal + tax amount - discount + tip + service charge.
    """
    stored = parse_money(adjustments.total, "total")
    if stored > 0:
        return stored
    amounts = _adjustment_amounts(adjustments)
    return round_cents(
        parse_money(adjustments.receipt_subtotal, "receipt subtotal")
        + amounts["tax_amount"]
        - amounts["discount"]
        + amounts["tip"]
        + amounts["service_charge"]
    )


def payer_name(bill: Bill) -> Optional[str]:
    """Display name of the payer, "Unknown User" for a dangling id, None if unset"""
    payer_id = bill.adjustments.payer_id
    if not payer_id:
        return None
    for p in bill.people:
        if p.id == payer_id:
            return p.name
    return UNKNOWN_PAYER
