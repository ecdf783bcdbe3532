"""
Tests for the tax calculators and jurisdiction tables.
"""

import json
from decimal import Decimal

import pytest

from general_ledger.exceptions import JurisdictionNotConfiguredError
from general_ledger.tax.calculators import (
    calculate_bracketed_flat_contribution,
    calculate_capped_percentage,
    calculate_health_contribution,
    calculate_paye,
    calculate_progressive_tax,
    calculate_social_security,
    calculate_withholding,
    calculate_withholding_tax,
)
from general_ledger.tax.jurisdictions import (
    JURISDICTIONS,
    ContributionBand,
    TaxBracket,
    get_jurisdiction,
    load_jurisdiction_file,
)

KENYA = JURISDICTIONS["KE"]


class TestProgressiveTax:

    BRACKETS = [
        TaxBracket(min_amount=0, max_amount=999, rate=10),
        TaxBracket(min_amount=1000, max_amount=None, rate=20),
    ]

    def test_income_within_first_bracket(self):
        assert calculate_progressive_tax(Decimal("500"), self.BRACKETS) == Decimal("50.00")

    def test_income_spanning_brackets(self):
        # 1000 at 10% + 1000 at 20%
        assert calculate_progressive_tax(Decimal("2000"), self.BRACKETS) == Decimal("300.00")

    def test_relief_is_subtracted(self):
        tax = calculate_progressive_tax(Decimal("2000"), self.BRACKETS, relief=Decimal("100"))
        assert tax == Decimal("200.00")

    def test_relief_never_makes_tax_negative(self):
        tax = calculate_progressive_tax(Decimal("100"), self.BRACKETS, relief=Decimal("500"))
        assert tax == Decimal("0.00")

    def test_zero_income(self):
        assert calculate_progressive_tax(Decimal("0"), self.BRACKETS) == Decimal("0.00")

    def test_tax_never_decreases_as_income_rises(self):
        previous = Decimal("0")
        for gross in range(0, 1_000_001, 7919):
            tax = calculate_paye(Decimal(gross), KENYA)
            assert tax >= previous
            previous = tax


class TestKenyanPaye:

    def test_salary_of_120000(self):
        assert calculate_paye(Decimal("120000"), KENYA) == Decimal("28383.15")

    def test_top_bracket(self):
        # 2400.10 + 2083.25 + 140300.10 + 97500.00 + 69999.65 - 2400
        assert calculate_paye(Decimal("1000000"), KENYA) == Decimal("309883.10")

    def test_below_relief_threshold(self):
        assert calculate_paye(Decimal("24000"), KENYA) == Decimal("0.00")


class TestFlatContribution:

    TABLE = [
        ContributionBand(min_salary=0, max_salary=9999, contribution=100),
        ContributionBand(min_salary=10000, max_salary=19999, contribution=250),
        ContributionBand(min_salary=20000, max_salary=None, contribution=400),
    ]

    def test_band_lookup(self):
        assert calculate_bracketed_flat_contribution(Decimal("5000"), self.TABLE) == Decimal("100.00")
        assert calculate_bracketed_flat_contribution(Decimal("10000"), self.TABLE) == Decimal("250.00")
        assert calculate_bracketed_flat_contribution(Decimal("19999.50"), self.TABLE) == Decimal("250.00")

    def test_above_every_band_pays_top_rate(self):
        assert calculate_bracketed_flat_contribution(Decimal("900000"), self.TABLE) == Decimal("400.00")

    def test_below_first_band_pays_nothing(self):
        table = [ContributionBand(min_salary=1000, max_salary=None, contribution=50)]
        assert calculate_bracketed_flat_contribution(Decimal("999"), table) == Decimal("0.00")

    def test_kenyan_health_bands(self):
        assert calculate_health_contribution(Decimal("5000"), KENYA) == Decimal("150.00")
        assert calculate_health_contribution(Decimal("45000"), KENYA) == Decimal("1100.00")
        assert calculate_health_contribution(Decimal("120000"), KENYA) == Decimal("1700.00")


class TestCappedPercentage:

    def test_below_cap(self):
        assert calculate_capped_percentage(Decimal("10000"), Decimal("6"), Decimal("1080")) == Decimal("600.00")

    def test_at_cap(self):
        assert calculate_capped_percentage(Decimal("18000"), Decimal("6"), Decimal("1080")) == Decimal("1080.00")

    def test_above_cap(self):
        assert calculate_capped_percentage(Decimal("500000"), Decimal("6"), Decimal("1080")) == Decimal("1080.00")

    def test_uncapped(self):
        assert calculate_capped_percentage(Decimal("500000"), Decimal("3")) == Decimal("15000.00")

    def test_jurisdiction_without_scheme(self):
        assert calculate_social_security(Decimal("50000"), JURISDICTIONS["ET"]) == Decimal("0.00")


class TestWithholding:

    def test_known_category(self):
        assert calculate_withholding(Decimal("100000"), "RENT", {"RENT": Decimal("10")}) == Decimal("10000.00")

    def test_unknown_category_withholds_nothing(self):
        assert calculate_withholding(Decimal("100000"), "LOTTERY", {"RENT": Decimal("10")}) == Decimal("0.00")

    def test_kenyan_professional_services(self):
        assert calculate_withholding_tax(Decimal("50000"), "PROFESSIONAL_SERVICES", KENYA) == Decimal("2500.00")


class TestJurisdictions:

    def test_all_east_african_tables_present(self):
        assert set(JURISDICTIONS) == {"KE", "TZ", "UG", "RW", "ET", "BI"}

    def test_default_jurisdiction_is_kenya(self):
        assert get_jurisdiction().country_code == "KE"

    def test_lookup_is_case_insensitive(self):
        assert get_jurisdiction("tz").country_code == "TZ"

    def test_unknown_jurisdiction_raises(self):
        with pytest.raises(JurisdictionNotConfiguredError):
            get_jurisdiction("ZZ")

    def test_brackets_must_be_ordered(self):
        data = KENYA.model_dump()
        data["paye_brackets"] = list(reversed(data["paye_brackets"]))
        with pytest.raises(ValueError):
            type(KENYA).model_validate(data)

    def test_table_can_be_loaded_from_json(self, tmp_path):
        path = tmp_path / "zz.json"
        path.write_text(json.dumps({
            "country_code": "ZZ",
            "country_name": "Testland",
            "currency": "TST",
            "tax_authority": "Test Revenue",
            "vat_rate": "10",
            "paye_brackets": [
                {"min_amount": "0", "max_amount": None, "rate": "10"},
            ],
        }))

        config = load_jurisdiction_file(path)
        assert config.country_code == "ZZ"
        assert calculate_paye(Decimal("1000"), config) == Decimal("100.00")
