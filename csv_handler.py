"""
CSV export and import functionality for Bill Splitter
"""
from __future__ import annotations
import csv
from typing import List

from config import BillFileError
from models import Item, Share
from utils import parse_money

COLUMNS = ['id', 'name', 'price', 'shares']


def export_items_to_csv(items: List[Item], filepath: str) -> None:
    """
    Export receipt items to CSV file
    CSV columns: id, name, price, shares (person:percentage;person:percentage)
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(COLUMNS)

        for it in items:
            shares_str = ';'.join([f"{s.person_id}:{s.percentage}" for s in it.shares])
            writer.writerow([
                it.id,
                it.name,
                f"{parse_money(it.price, f'price of item {it.id!r}'):.2f}",
                shares_str,
            ])


def import_items_from_csv(filepath: str) -> List[Item]:
    """
    Import receipt items from CSV file
    Prices and percentages are kept as text; the engine parses them.
    """
    items = []

    with open(filepath, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        missing = [c for c in ('id', 'price') if c not in (reader.fieldnames or [])]
        if missing:
            raise BillFileError(f"{filepath}: missing column(s) {', '.join(missing)}")

        for row in reader:
            shares = []
            seen = set()
            for pair in (row.get('shares') or '').split(';'):
                if ':' not in pair:
                    continue
                person, pct = pair.split(':', 1)
                person = person.strip()
                if not person or person in seen:
                    continue
                seen.add(person)
                shares.append(Share(person, pct.strip()))

            items.append(Item(
                id=row['id'],
                name=row.get('name') or '',
                price=row['price'],
                shares=shares,
            ))

    return items
