from decimal import Decimal

from models import Bill, BillAdjustments, Item, Person, Share
from computations import apply_recalculated_totals, bill_total, compute_allocation, payer_name, recalculate_totals


def test_scenario_e():
    totals = recalculate_totals("100.00", 0.08, discount="10.00", tip="5.00", service_charge="2.00")
    assert totals.tax_amount == Decimal("8.00")
    assert totals.total == Decimal("105.00")


def test_tax_rounds_half_up():
    # 12.50 * 0.07 = 0.875
    assert recalculate_totals("12.50", "0.07").tax_amount == Decimal("0.88")


def test_malformed_inputs_count_as_zero():
    totals = recalculate_totals("50", "abc", discount="", tip=None)
    assert totals.tax_amount == Decimal("0.00")
    assert totals.total == Decimal("50.00")


def test_apply_recalculated_totals_leaves_input_bill_alone():
    adj = BillAdjustments(tax_rate="0.1", receipt_subtotal="40.00", tip="2.00", tax_amount="9.99")
    bill = Bill(people=[], items=[], adjustments=adj)
    updated = apply_recalculated_totals(bill)
    assert updated.adjustments.tax_amount == Decimal("4.00")
    assert updated.adjustments.total == Decimal("46.00")
    assert bill.adjustments.tax_amount == "9.99"


def test_person_totals_add_up_to_recalculated_total():
    people = [Person("p1", "Ann"), Person("p2", "Bo")]
    items = [
        Item("a", "steak", "60.00", [Share("p1", 100)]),
        Item("b", "salad", "40.00", [Share("p2", 100)]),
    ]
    totals = recalculate_totals("100.00", "0.10", discount="10.00", tip="4.00", service_charge="2.00")
    bill = apply_recalculated_totals(Bill(people, items), totals)
    result = compute_allocation(bill)
    assert result.breakdown_for("p1").total == Decimal("63.00")
    assert result.breakdown_for("p2").total == Decimal("43.00")
    assert sum(b.total for b in result.breakdowns) == totals.total


def test_payer_name():
    people = [Person("p1", "Ann")]
    assert payer_name(Bill(people, [], BillAdjustments(payer_id="p1"))) == "Ann"
    assert payer_name(Bill(people, [], BillAdjustments(payer_id="zz"))) == "Unknown User"
    assert payer_name(Bill(people, [])) is None


def test_bill_total_derived_when_not_stored():
    adj = BillAdjustments(receipt_subtotal="30.00", tax_amount="2.40", discount="1.00", tip="9.00")
    assert bill_total(adj) == Decimal("40.40")


def test_bill_total_prefers_stored_total():
    adj = BillAdjustments(receipt_subtotal="30.00", tax_amount="2.40", total="33.00")
    assert bill_total(adj) == Decimal("33.00")
