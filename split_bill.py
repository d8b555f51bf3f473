"""
Bill Splitter
- Assign receipt items to people with percentage shares.
- Print each person's subtotal, tax, discount, tip, service charge and total,
  and whether the assignments reconcile with the receipt subtotal.
- Optionally export an Excel report, the items as CSV, or the expense payload.

Run:
  python split_bill.py bill.json [--excel report.xlsx] [--csv items.csv] [--payload expense.json]

Dependencies:
  pip install openpyxl
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import List, Optional

from models import AllocationResult, Bill, ReconciliationStatus
from config import BillFileError, build_expense_payload, load_bill
from computations import (
    apply_recalculated_totals,
    bill_total,
    compute_allocation,
    payer_name,
    sync_receipt_subtotal,
)
from csv_handler import export_items_to_csv
from excel_export import export_excel
from utils import format_money, parse_money, parse_rate

logger = logging.getLogger(__name__)


def format_summary(bill: Bill, result: AllocationResult) -> str:
    """Plain-text bill summary and individual shares"""
    adj = bill.adjustments
    lines = [
        f"Subtotal: {format_money(adj.receipt_subtotal)}",
        f"Tax ({parse_rate(adj.tax_rate) * 100:.1f}%): {format_money(adj.tax_amount)}",
    ]
    for label, value in (("Tip", adj.tip), ("Service Charge", adj.service_charge)):
        if parse_money(value, label.lower()) > 0:
            lines.append(f"{label}: {format_money(value)}")
    if parse_money(adj.discount, "discount") > 0:
        lines.append(f"Discount: -{format_money(adj.discount)}")
    lines.append(f"Total: {format_money(bill_total(adj))}")
    payer = payer_name(bill)
    if payer:
        lines.append(f"Payer: {payer}")

    lines.append("")
    lines.append("Individual Shares")
    for b in result.active_breakdowns():
        tag = " (payer)" if b.is_payer else ""
        noun = "item" if b.item_count == 1 else "items"
        lines.append(f"  {b.name}{tag}: {b.item_count} {noun}")
        lines.append(f"    Subtotal:  {format_money(b.subtotal)}")
        lines.append(f"    Tax share: {format_money(b.tax_share)}")
        if b.discount_share > 0:
            lines.append(f"    Discount:  -{format_money(b.discount_share)}")
        if b.tip_share > 0:
            lines.append(f"    Tip share: {format_money(b.tip_share)}")
        if b.service_charge_share > 0:
            lines.append(f"    Service charge: {format_money(b.service_charge_share)}")
        lines.append(f"    Total:     {format_money(b.total)}")

    recon = result.reconciliation
    if recon.unassigned_item_count:
        noun = "item" if recon.unassigned_item_count == 1 else "items"
        lines.append(f"  Unassigned: {recon.unassigned_item_count} {noun}, {format_money(recon.unassigned_total)}")

    lines.append("")
    lines.append(recon.message)
    if recon.status is ReconciliationStatus.MISMATCHED:
        word = "more" if recon.difference > 0 else "less"
        lines.append(
            f"Assigned items total is {format_money(abs(recon.difference))} {word} than receipt subtotal"
        )
    elif recon.status is ReconciliationStatus.INCOMPLETE:
        lines.append(f"{format_money(recon.unassigned_total)} worth of items are not assigned to anyone")
        if recon.all_items_match_subtotal:
            lines.append("All items total matches receipt subtotal")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="split-bill", description="Split a receipt between people")
    parser.add_argument("bill", help="bill JSON file")
    parser.add_argument("--excel", metavar="PATH", help="write an Excel report")
    parser.add_argument("--csv", metavar="PATH", help="write the items as CSV")
    parser.add_argument("--payload", metavar="PATH", help="write the expense payload as JSON")
    parser.add_argument("--sync-subtotal", action="store_true",
                        help="set the receipt subtotal to the assigned items total")
    parser.add_argument("--recalculate", action="store_true",
                        help="recalculate tax and total from subtotal, rate and charges")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        bill = load_bill(args.bill)
    except (BillFileError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.sync_subtotal:
        bill = sync_receipt_subtotal(bill)
    if args.recalculate:
        bill = apply_recalculated_totals(bill)

    result = compute_allocation(bill)
    print(format_summary(bill, result))

    try:
        if args.excel:
            export_excel(bill, args.excel, result)
        if args.csv:
            export_items_to_csv(bill.items, args.csv)
        if args.payload:
            if result.reconciliation_status is not ReconciliationStatus.BALANCED:
                logger.warning("Writing expense payload for a bill that is %s", result.reconciliation_status.value)
            with open(args.payload, "w", encoding="utf-8") as f:
                json.dump(build_expense_payload(bill, result), f, ensure_ascii=False, indent=2)
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
