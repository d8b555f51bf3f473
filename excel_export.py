"""
Excel export functionality for Bill Splitter
"""
from __future__ import annotations
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import AllocationResult, Bill
from computations import compute_allocation, normalize_items, payer_name

MONEY_FORMAT = "0.00"

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill("solid", fgColor="4F81BD")
UNASSIGNED_FILL = PatternFill("solid", fgColor="FFEB9C")
_THIN = Side(style="thin", color="A0A0A0")
HEADER_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


def _add_header(ws, labels):
    """Write the styled, frozen header row of a fresh sheet"""
    ws.append(labels)
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = HEADER_BORDER
    ws.freeze_panes = "A2"


def _shown_text(cell) -> str:
    """Roughly what Excel displays for a cell"""
    v = cell.value
    if v is None or (isinstance(v, str) and v.startswith("=")):
        # formulas are sized by the values they total
        return ""
    if isinstance(v, float) and cell.number_format == MONEY_FORMAT:
        return f"{v:.2f}"
    return str(v)


def _fit_columns(ws, min_width=10, max_width=45):
    """Size each column to its widest displayed value"""
    for col in ws.iter_cols(min_row=1, max_row=ws.max_row):
        widest = max((len(_shown_text(c)) for c in col), default=0)
        letter = get_column_letter(col[0].column)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, widest + 2))


def _write_items_sheet(wb, bill: Bill) -> None:
    people = bill.people
    ws = wb.create_sheet("Items")
    headers = ["item", "price"] + [f"{p.name} %" for p in people] + [f"{p.name} amount" for p in people]
    _add_header(ws, headers)

    for n in normalize_items(bill.items):
        pcts = [n.percentages.get(p.id) for p in people]
        amounts = [None if pct is None else float(n.price * pct / 100) for pct in pcts]
        row = [n.item.name or n.item.id, float(n.price)]
        row += [None if pct is None else float(pct) for pct in pcts]
        row += amounts
        ws.append(row)
        if not n.is_assigned:
            ws.cell(ws.max_row, 1).fill = UNASSIGNED_FILL

    for r in range(2, ws.max_row + 1):
        ws.cell(r, 2).number_format = MONEY_FORMAT
        for c in range(3 + len(people), 3 + 2 * len(people)):
            ws.cell(r, c).number_format = MONEY_FORMAT
    _fit_columns(ws)


def _write_breakdown_sheet(wb, bill: Bill, result: AllocationResult) -> None:
    ws = wb.create_sheet("Breakdown")
    _add_header(ws, ["Person", "Items", "Subtotal", "Tax", "Discount", "Tip", "Service Charge", "Total", "Payer"])

    active = result.active_breakdowns()
    for b in active:
        ws.append([
            b.name, b.item_count, float(b.subtotal), float(b.tax_share), float(b.discount_share),
            float(b.tip_share), float(b.service_charge_share), float(b.total), "yes" if b.is_payer else "",
        ])

    if active:
        ws.append(["TOTALS"])
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        # Using Excel formulas for better transparency
        for col in range(2, 9):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{trow - 1})"

    for r in range(2, ws.max_row + 1):
        for c in range(3, 9):
            ws.cell(r, c).number_format = MONEY_FORMAT

    payer = payer_name(bill)
    if payer:
        ws.append([])
        ws.append(["Payer", payer])
    _fit_columns(ws)


def _write_reconciliation_sheet(wb, result: AllocationResult) -> None:
    recon = result.reconciliation
    ws = wb.create_sheet("Reconciliation")
    _add_header(ws, ["Check", "Value"])
    rows = [
        ("Status", recon.status.value),
        ("Message", recon.message),
        ("Assigned items", float(recon.assigned_total)),
        ("Assigned item count", recon.assigned_item_count),
        ("Unassigned items", float(recon.unassigned_total)),
        ("Unassigned item count", recon.unassigned_item_count),
        ("All items total", float(recon.all_items_total)),
        ("Receipt subtotal", float(recon.receipt_subtotal)),
        ("Difference", float(recon.difference)),
        ("Direction", recon.direction.value if recon.direction else ""),
    ]
    for label, value in rows:
        ws.append([label, value])
        if isinstance(value, float):
            ws.cell(ws.max_row, 2).number_format = MONEY_FORMAT
    _fit_columns(ws)


def export_excel(bill: Bill, filepath: str, result: Optional[AllocationResult] = None) -> None:
    """
    Export a bill to an Excel file with sheets:
    - Items (price, each person's percentage and amount)
    - Breakdown (one row per person with items, plus totals)
    - Reconciliation
    """
    if result is None:
        result = compute_allocation(bill)

    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    _write_items_sheet(wb, bill)
    _write_breakdown_sheet(wb, bill, result)
    _write_reconciliation_sheet(wb, result)

    wb.save(filepath)
