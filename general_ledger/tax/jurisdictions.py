"""
Jurisdiction tax tables.

Brackets and rates are data, not code: the calculators in
``general_ledger.tax.calculators`` only ever read these models,
so supporting another country means adding a table (or pointing
TAX_TABLES_PATH at a JSON file), never touching the logic.
"""

import json
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from general_ledger.config import get_settings
from general_ledger.exceptions import JurisdictionNotConfiguredError


class TaxBracket(BaseModel):
    """One band of a progressive schedule. ``max_amount=None`` is open-ended."""
    min_amount: Decimal = Field(ge=0)
    max_amount: Decimal | None = None
    rate: Decimal = Field(ge=0, le=100)


class ContributionBand(BaseModel):
    """Salary band paying a flat contribution."""
    min_salary: Decimal = Field(ge=0)
    max_salary: Decimal | None = None
    contribution: Decimal = Field(ge=0)


class SocialSecurityRule(BaseModel):
    name: str
    rate: Decimal = Field(ge=0, le=100)
    cap: Decimal | None = None


class HealthInsuranceRule(BaseModel):
    name: str
    bands: list[ContributionBand] = Field(min_length=1)


class JurisdictionTaxConfig(BaseModel):
    country_code: str = Field(min_length=2, max_length=3)
    country_name: str
    currency: str = Field(min_length=3, max_length=3)
    tax_authority: str
    vat_rate: Decimal = Field(ge=0, le=100)
    # Share of output VAT withheld at source by appointed agents
    withholding_vat_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    # Day of the month following the period on which VAT is due
    vat_due_day: int = Field(default=20, ge=1, le=28)
    personal_relief: Decimal = Field(default=Decimal("0"), ge=0)
    paye_brackets: list[TaxBracket] = Field(min_length=1)
    withholding_rates: dict[str, Decimal] = Field(default_factory=dict)
    social_security: SocialSecurityRule | None = None
    health_insurance: HealthInsuranceRule | None = None

    @model_validator(mode="after")
    def brackets_must_be_ordered(self):
        lows = [b.min_amount for b in self.paye_brackets]
        if lows != sorted(lows):
            raise ValueError("paye_brackets must be ordered by min_amount")
        if self.health_insurance:
            lows = [b.min_salary for b in self.health_insurance.bands]
            if lows != sorted(lows):
                raise ValueError("health bands must be ordered by min_salary")
        return self


def _brackets(*rows) -> list[TaxBracket]:
    return [
        TaxBracket(min_amount=low, max_amount=high, rate=rate)
        for low, high, rate in rows
    ]


def _bands(*rows) -> list[ContributionBand]:
    return [
        ContributionBand(min_salary=low, max_salary=high, contribution=amount)
        for low, high, amount in rows
    ]


JURISDICTIONS: dict[str, JurisdictionTaxConfig] = {
    "KE": JurisdictionTaxConfig(
        country_code="KE",
        country_name="Kenya",
        currency="KES",
        tax_authority="Kenya Revenue Authority (KRA)",
        vat_rate=Decimal("16"),
        withholding_vat_rate=Decimal("2"),
        personal_relief=Decimal("2400"),
        paye_brackets=_brackets(
            (0, 24000, 10),
            (24001, 32333, 25),
            (32334, 500000, 30),
            (500001, 800000, "32.5"),
            (800001, None, 35),
        ),
        withholding_rates={
            "PROFESSIONAL_SERVICES": Decimal("5"),
            "RENT": Decimal("10"),
            "INTEREST": Decimal("15"),
            "DIVIDENDS": Decimal("5"),
            "MANAGEMENT_FEES": Decimal("5"),
            "TECHNICAL_FEES": Decimal("5"),
            "COMMISSION": Decimal("5"),
            "ROYALTIES": Decimal("5"),
        },
        # 6% of pensionable pay up to 18,000
        social_security=SocialSecurityRule(
            name="National Social Security Fund (NSSF)",
            rate=Decimal("6"),
            cap=Decimal("1080"),
        ),
        health_insurance=HealthInsuranceRule(
            name="National Hospital Insurance Fund (NHIF)",
            bands=_bands(
                (0, 5999, 150),
                (6000, 7999, 300),
                (8000, 11999, 400),
                (12000, 14999, 500),
                (15000, 19999, 600),
                (20000, 24999, 750),
                (25000, 29999, 850),
                (30000, 34999, 900),
                (35000, 39999, 950),
                (40000, 44999, 1000),
                (45000, 49999, 1100),
                (50000, 59999, 1200),
                (60000, 69999, 1300),
                (70000, 79999, 1400),
                (80000, 89999, 1500),
                (90000, 99999, 1600),
                (100000, None, 1700),
            ),
        ),
    ),
    "TZ": JurisdictionTaxConfig(
        country_code="TZ",
        country_name="Tanzania",
        currency="TZS",
        tax_authority="Tanzania Revenue Authority (TRA)",
        vat_rate=Decimal("18"),
        paye_brackets=_brackets(
            (0, 270000, 0),
            (270001, 520000, 8),
            (520001, 760000, 20),
            (760001, 1000000, 25),
            (1000001, None, 30),
        ),
        withholding_rates={
            "PROFESSIONAL_SERVICES": Decimal("5"),
            "RENT": Decimal("10"),
            "INTEREST": Decimal("10"),
            "DIVIDENDS": Decimal("10"),
            "MANAGEMENT_FEES": Decimal("5"),
            "TECHNICAL_FEES": Decimal("5"),
        },
        social_security=SocialSecurityRule(
            name="National Social Security Fund (NSSF)",
            rate=Decimal("10"),
        ),
    ),
    "UG": JurisdictionTaxConfig(
        country_code="UG",
        country_name="Uganda",
        currency="UGX",
        tax_authority="Uganda Revenue Authority (URA)",
        vat_rate=Decimal("18"),
        paye_brackets=_brackets(
            (0, 235000, 0),
            (235001, 335000, 10),
            (335001, 410000, 20),
            (410001, None, 30),
        ),
        withholding_rates={
            "PROFESSIONAL_SERVICES": Decimal("6"),
            "RENT": Decimal("10"),
            "INTEREST": Decimal("15"),
            "DIVIDENDS": Decimal("10"),
            "MANAGEMENT_FEES": Decimal("5"),
            "ROYALTIES": Decimal("15"),
        },
        # 5% of insurable pay up to 400,000
        social_security=SocialSecurityRule(
            name="National Social Security Fund (NSSF)",
            rate=Decimal("5"),
            cap=Decimal("20000"),
        ),
    ),
    "RW": JurisdictionTaxConfig(
        country_code="RW",
        country_name="Rwanda",
        currency="RWF",
        tax_authority="Rwanda Revenue Authority (RRA)",
        vat_rate=Decimal("18"),
        paye_brackets=_brackets(
            (0, 30000, 0),
            (30001, 100000, 20),
            (100001, None, 30),
        ),
        withholding_rates={
            "PROFESSIONAL_SERVICES": Decimal("5.1"),
            "RENT": Decimal("15"),
            "INTEREST": Decimal("15"),
            "DIVIDENDS": Decimal("15"),
            "ROYALTIES": Decimal("15"),
        },
        social_security=SocialSecurityRule(
            name="Rwanda Social Security Board (RSSB)",
            rate=Decimal("3"),
        ),
    ),
    "ET": JurisdictionTaxConfig(
        country_code="ET",
        country_name="Ethiopia",
        currency="ETB",
        tax_authority="Ethiopian Revenue and Customs Authority (ERCA)",
        vat_rate=Decimal("15"),
        paye_brackets=_brackets(
            (0, 600, 0),
            (601, 1650, 10),
            (1651, 3200, 15),
            (3201, 5250, 20),
            (5251, 7800, 25),
            (7801, 10900, 30),
            (10901, None, 35),
        ),
        withholding_rates={
            "PROFESSIONAL_SERVICES": Decimal("2"),
            "RENT": Decimal("5"),
            "INTEREST": Decimal("5"),
            "DIVIDENDS": Decimal("10"),
            "ROYALTIES": Decimal("5"),
        },
    ),
    "BI": JurisdictionTaxConfig(
        country_code="BI",
        country_name="Burundi",
        currency="BIF",
        tax_authority="Office Burundais des Recettes (OBR)",
        vat_rate=Decimal("18"),
        paye_brackets=_brackets(
            (0, 50000, 0),
            (50001, 150000, 15),
            (150001, 300000, 20),
            (300001, None, 30),
        ),
        withholding_rates={
            "PROFESSIONAL_SERVICES": Decimal("5"),
            "RENT": Decimal("10"),
            "INTEREST": Decimal("15"),
            "DIVIDENDS": Decimal("10"),
        },
    ),
}


def load_jurisdiction_file(path: str | Path) -> JurisdictionTaxConfig:
    """Load a jurisdiction table from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return JurisdictionTaxConfig.model_validate(data)


@lru_cache()
def _file_override(path: str) -> JurisdictionTaxConfig:
    return load_jurisdiction_file(path)


def get_jurisdiction(code: str | None = None) -> JurisdictionTaxConfig:
    """
    Return the tax table for a jurisdiction.

    With no code, the configured jurisdiction is used. A table
    loaded from TAX_TABLES_PATH replaces the built-in entry with
    the same country code.
    """
    settings = get_settings()
    code = (code or settings.JURISDICTION).upper()

    if settings.TAX_TABLES_PATH:
        override = _file_override(settings.TAX_TABLES_PATH)
        if override.country_code.upper() == code:
            return override

    try:
        return JURISDICTIONS[code]
    except KeyError:
        raise JurisdictionNotConfiguredError(
            f"No tax table configured for jurisdiction '{code}'"
        ) from None
