"""Tests for night-by-night price folding, extras and tax."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from bungalow_pricing.core.errors import ComputationError
from bungalow_pricing.models import AmountType, ExtraChargeType, PriceRuleKind
from bungalow_pricing.services import rule_selector
from bungalow_pricing.services.pricing_types import ExtraOption, LineCategory, Unit
from bungalow_pricing.services.rate_calculator import compute_breakdown, tax_portion

from tests.fakes import make_rule

CHECK_IN = date(2024, 6, 10)


def _nights(count: int, rules=(), start: date = CHECK_IN):
    return {start + timedelta(days=offset): list(rules) for offset in range(count)}


def _lines(quote, category: LineCategory):
    return [line for line in quote.lines if line.category is category]


def test_plain_stay_with_exclusive_tax(unit: Unit) -> None:
    quote = compute_breakdown(unit, _nights(2), guests=2, tax_rate="10")

    assert quote.nights == 2
    assert quote.check_out == date(2024, 6, 12)
    assert quote.base_amount == Decimal("2000.00")
    assert quote.tax_amount == Decimal("200.00")
    assert quote.total_amount == Decimal("2200.00")
    assert [line.label for line in quote.lines] == ["Base rate", "Tax (10%)"]


def test_fixed_surcharge_is_taxed(unit: Unit) -> None:
    surcharge = make_rule("Lake view", amount="100")

    quote = compute_breakdown(unit, _nights(2, [surcharge]), guests=2, tax_rate="10")

    assert quote.base_amount == Decimal("2200.00")
    assert quote.tax_amount == Decimal("220.00")
    assert quote.total_amount == Decimal("2420.00")
    (rule_line,) = _lines(quote, LineCategory.RULE)
    assert rule_line.amount == Decimal("200.00")
    assert rule_line.rule_id == surcharge.id
    assert rule_line.nights == (date(2024, 6, 10), date(2024, 6, 11))


def test_unit_rule_applies_before_global_percentage(unit: Unit) -> None:
    unit_discount = make_rule("Pine discount", amount="-100", unit_id=unit.id)
    global_markup = make_rule(
        "High demand", amount="10", amount_type=AmountType.PERCENTAGE
    )
    selection = rule_selector.select_applicable_rules(
        unit.id, CHECK_IN, CHECK_IN + timedelta(days=2), [global_markup, unit_discount]
    )

    quote = compute_breakdown(unit, selection, guests=2)
    reversed_quote = compute_breakdown(
        unit, _nights(2, [global_markup, unit_discount]), guests=2
    )

    assert quote.base_amount == Decimal("1980.00")
    assert reversed_quote.base_amount == Decimal("2000.00")
    assert quote.discount_amount == Decimal("200.00")


def test_percentage_discount_then_markup_gives_990(unit: Unit) -> None:
    unit_discount = make_rule(
        "Pine discount", amount="-10", amount_type=AmountType.PERCENTAGE, unit_id=unit.id
    )
    global_markup = make_rule(
        "High demand", amount="10", amount_type=AmountType.PERCENTAGE
    )
    selection = rule_selector.select_applicable_rules(
        unit.id, CHECK_IN, CHECK_IN + timedelta(days=1), [global_markup, unit_discount]
    )

    quote = compute_breakdown(unit, selection, guests=2)

    assert quote.base_amount == Decimal("990.00")
    assert [line.amount for line in _lines(quote, LineCategory.RULE)] == [
        Decimal("-100.00"),
        Decimal("90.00"),
    ]


def test_percentages_compound(unit: Unit) -> None:
    rules = [
        make_rule("First", amount="10", amount_type=AmountType.PERCENTAGE),
        make_rule("Second", amount="10", amount_type=AmountType.PERCENTAGE),
    ]

    quote = compute_breakdown(unit, _nights(1, rules), guests=2)

    assert quote.base_amount == Decimal("1210.00")


def test_negative_night_is_clamped_and_flagged(unit: Unit, caplog) -> None:
    rules = [make_rule("Goodwill", amount="-1500")]

    with caplog.at_level("WARNING"):
        quote = compute_breakdown(unit, _nights(1, rules), guests=2, tax_rate="10")

    assert quote.base_amount == Decimal("0.00")
    assert quote.total_amount == Decimal("0.00")
    assert quote.discount_amount == Decimal("1000.00")
    assert quote.clamped_nights == (CHECK_IN,)
    (adjustment,) = _lines(quote, LineCategory.ADJUSTMENT)
    assert adjustment.amount == Decimal("500.00")
    assert "clamping to zero" in caplog.text


def test_clamped_discount_reports_only_the_effective_reduction(unit: Unit) -> None:
    rules = [
        make_rule("Goodwill", amount="-1500"),
        make_rule("Linen", amount="100"),
    ]

    quote = compute_breakdown(unit, _nights(1, rules), guests=2)

    assert quote.base_amount == Decimal("0.00")
    assert quote.discount_amount == Decimal("1100.00")
    (adjustment,) = _lines(quote, LineCategory.ADJUSTMENT)
    assert adjustment.amount == Decimal("400.00")


def test_inclusive_tax_is_extracted_not_added() -> None:
    unit = Unit(id=uuid.uuid4(), base_price=Decimal("1200"), tax_inclusive=True)

    quote = compute_breakdown(unit, _nights(1), guests=1, tax_rate="20")

    assert quote.tax_amount == Decimal("200.00")
    assert quote.total_amount == Decimal("1200.00")
    assert quote.tax_inclusive is True
    assert _lines(quote, LineCategory.TAX)[0].label == "Tax included (20%)"


def test_rounding_happens_once_at_the_end() -> None:
    unit = Unit(id=uuid.uuid4(), base_price=Decimal("100"))
    third = make_rule("Third", amount="33.3333", amount_type=AmountType.PERCENTAGE)

    quote = compute_breakdown(unit, _nights(3, [third]), guests=1)

    # Rounding each night first would give 3 x 133.33 = 399.99.
    assert quote.base_amount == Decimal("400.00")
    assert quote.total_amount == Decimal("400.00")
    assert _lines(quote, LineCategory.TAX) == []


def test_extras_are_charged_by_type_and_taxed(unit: Unit) -> None:
    markup = make_rule("Peak", amount="10", amount_type=AmountType.PERCENTAGE)
    extras = [
        (ExtraOption("CLEANING", "Final cleaning", Decimal("300"), ExtraChargeType.FLAT), 1),
        (ExtraOption("JACUZZI", "Heated jacuzzi", Decimal("250"), ExtraChargeType.PER_NIGHT), 1),
        (ExtraOption("BREAKFAST", "Breakfast", Decimal("150"), ExtraChargeType.PER_GUEST), 1),
    ]

    quote = compute_breakdown(unit, _nights(2, [markup]), guests=3, extras=extras, tax_rate="10")

    assert quote.base_amount == Decimal("2200.00")
    assert quote.extras_amount == Decimal("1250.00")
    assert quote.tax_amount == Decimal("345.00")
    assert quote.total_amount == Decimal("3795.00")
    assert [line.amount for line in _lines(quote, LineCategory.EXTRA)] == [
        Decimal("300.00"),
        Decimal("500.00"),
        Decimal("450.00"),
    ]


def test_extra_quantity_appears_in_label(unit: Unit) -> None:
    cleaning = ExtraOption("CLEANING", "Final cleaning", Decimal("300"))

    quote = compute_breakdown(unit, _nights(1), guests=1, extras=[(cleaning, 2)])

    (line,) = _lines(quote, LineCategory.EXTRA)
    assert line.label == "Final cleaning x2"
    assert line.amount == Decimal("600.00")


def test_per_person_rule_counts_guests_above_included(unit: Unit) -> None:
    per_person = make_rule("Extra guest", kind=PriceRuleKind.PER_PERSON, amount="200")

    crowded = compute_breakdown(unit, _nights(2, [per_person]), guests=4)
    couple = compute_breakdown(unit, _nights(2, [per_person]), guests=2)

    assert crowded.base_amount == Decimal("2800.00")
    assert _lines(crowded, LineCategory.RULE)[0].amount == Decimal("800.00")
    assert couple.base_amount == Decimal("2000.00")
    assert _lines(couple, LineCategory.RULE) == []


def test_per_person_percentage_rule(unit: Unit) -> None:
    per_person = make_rule(
        "Extra guest",
        kind=PriceRuleKind.PER_PERSON,
        amount="5",
        amount_type=AmountType.PERCENTAGE,
    )

    quote = compute_breakdown(unit, _nights(1, [per_person]), guests=3)

    assert quote.base_amount == Decimal("1050.00")


def test_tax_portion() -> None:
    assert tax_portion(Decimal("1000"), Decimal("10"), inclusive=False) == Decimal("100")
    assert tax_portion(Decimal("1100"), Decimal("10"), inclusive=True) == Decimal("100")


def test_stay_without_nights_is_rejected(unit: Unit) -> None:
    with pytest.raises(ComputationError):
        compute_breakdown(unit, {}, guests=1)


def test_gapped_nights_are_rejected(unit: Unit) -> None:
    nights = {date(2024, 6, 10): [], date(2024, 6, 12): []}

    with pytest.raises(ComputationError):
        compute_breakdown(unit, nights, guests=1)
