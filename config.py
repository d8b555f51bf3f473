"""
Configuration and data loading/saving for Bill Splitter
"""
from __future__ import annotations
import json
import logging
import os
import time
from decimal import Decimal
from typing import List, Optional

from models import AllocationResult, Bill, BillAdjustments, Item, Person, Share
from computations import compute_allocation
from utils import app_dir, parse_money, parse_rate

logger = logging.getLogger(__name__)


class BillFileError(ValueError):
    """A bill, people or items file could not be read"""


def _money_str(value) -> str:
    return f"{parse_money(value):.2f}"


def _number(value: Decimal):
    # keep whole percentages as ints in JSON
    return int(value) if value == value.to_integral_value() else float(value)


def load_people(path: str) -> List[Person]:
    """Load people list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    except json.JSONDecodeError as e:
        raise BillFileError(f"{path}: invalid JSON ({e})") from e
    out = []
    for i, p in enumerate(data.get("people", [])):
        if isinstance(p, str):
            out.append(Person(id=f"p{i + 1}", name=p))
        else:
            out.append(Person(id=str(p["id"]), name=p.get("name", str(p["id"])), color=p.get("color", "")))
    return out


def get_default_bill() -> Bill:
    """Create an empty bill with the people saved in the app directory"""
    people = load_people(os.path.join(app_dir(), "people.json"))
    if not people:
        people = [Person("p1", "Me")]  # fallback
    return Bill(people=people, items=[], adjustments=BillAdjustments())


def bill_to_dict(bill: Bill) -> dict:
    """Convert Bill object to dictionary for JSON serialization"""
    adj = bill.adjustments
    return {
        "title": bill.title,
        "receipt_path": bill.receipt_path,
        "people": [{"id": p.id, "name": p.name, "color": p.color} for p in bill.people],
        "items": [
            {
                "id": it.id,
                "name": it.name,
                "price": _money_str(it.price),
                "shares": [_share_to_dict(s) for s in it.shares],
            }
            for it in bill.items
        ],
        "adjustments": {
            "tax_rate": _number(parse_rate(adj.tax_rate)),
            "tax_amount": _money_str(adj.tax_amount),
            "discount": _money_str(adj.discount),
            "tip": _money_str(adj.tip),
            "service_charge": _money_str(adj.service_charge),
            "receipt_subtotal": _money_str(adj.receipt_subtotal),
            "payer_id": adj.payer_id,
            "total": _money_str(adj.total),
        },
    }


def _share_to_dict(share: Share) -> dict:
    try:
        pct = Decimal(str(share.percentage))
    except ArithmeticError:
        pct = None
    if pct is None or not pct.is_finite():
        # leave malformed input as typed; the engine reads it as 0
        return {"person_id": share.person_id, "percentage": share.percentage}
    return {"person_id": share.person_id, "percentage": _number(pct)}


def dict_to_bill(d: dict) -> Bill:
    """Convert dictionary from JSON to Bill object; numbers stay as given"""
    try:
        people = [Person(id=str(p["id"]), name=p.get("name", str(p["id"])), color=p.get("color", ""))
                  for p in d.get("people", [])]
        items = [
            Item(
                id=str(it["id"]),
                name=it.get("name", ""),
                price=it.get("price"),
                shares=[Share(str(s["person_id"]), s.get("percentage")) for s in it.get("shares", [])],
            )
            for it in d.get("items", [])
        ]
    except (KeyError, TypeError, AttributeError) as e:
        raise BillFileError(f"malformed bill data: {e!r}") from e
    a = d.get("adjustments", {}) or {}
    adjustments = BillAdjustments(
        tax_rate=a.get("tax_rate", 0),
        tax_amount=a.get("tax_amount", 0),
        discount=a.get("discount", 0),
        tip=a.get("tip", 0),
        service_charge=a.get("service_charge", 0),
        receipt_subtotal=a.get("receipt_subtotal", 0),
        payer_id=a.get("payer_id"),
        total=a.get("total", 0),
    )
    return Bill(
        people=people,
        items=items,
        adjustments=adjustments,
        title=d.get("title", ""),
        receipt_path=d.get("receipt_path", "") or "",
    )


def load_bill(path: str) -> Bill:
    """Load a bill snapshot from a JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise BillFileError(f"{path}: invalid JSON ({e})") from e
    logger.debug("Loaded bill from %s", path)
    return dict_to_bill(data)


def save_bill(bill: Bill, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(bill_to_dict(bill), f, ensure_ascii=False, indent=2)


def build_expense_payload(bill: Bill, result: Optional[AllocationResult] = None) -> dict:
    """
    Package a bill for the expense service. Money goes out as two-decimal
    strings taken from the same allocation the user saw, so every person's
    total adds up from its parts.
    """
    if result is None:
        result = compute_allocation(bill)
    data = bill_to_dict(bill)
    adj = data["adjustments"]
    return {
        "title": bill.title,
        "payer": bill.adjustments.payer_id,
        "receiptPath": bill.receipt_path or "",
        "subtotal": adj["receipt_subtotal"],
        "taxRate": adj["tax_rate"],
        "tax": adj["tax_amount"],
        "discount": adj["discount"],
        "tip": adj["tip"],
        "serviceCharge": adj["service_charge"],
        "total": adj["total"],
        "reconciliation": result.reconciliation_status.value,
        "items": [
            {"id": it["id"], "name": it["name"], "price": it["price"],
             "shares": [{"userId": s["person_id"], "percentage": s["percentage"]} for s in it["shares"]]}
            for it in data["items"]
        ],
        "splits": [
            {
                "userId": b.person_id,
                "items": b.item_count,
                "subtotal": f"{b.subtotal:.2f}",
                "tax": f"{b.tax_share:.2f}",
                "discount": f"{b.discount_share:.2f}",
                "tip": f"{b.tip_share:.2f}",
                "serviceCharge": f"{b.service_charge_share:.2f}",
                "total": f"{b.total:.2f}",
            }
            for b in result.active_breakdowns()
        ],
    }


def fallback_expense_id(response: Optional[dict]) -> str:
    """Id returned by the expense service, or a synthetic exp_<millis> one"""
    if response and response.get("id"):
        return str(response["id"])
    return f"exp_{int(time.time() * 1000)}"
