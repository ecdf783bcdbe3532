"""
Tests for the chart of accounts service.
"""

from decimal import Decimal

import pytest

from general_ledger.exceptions import (
    AccountCodeNotConfiguredError,
    DuplicateCodeError,
    HasOpenTransactionsError,
    NotFoundError,
)
from general_ledger.models.enums import AccountSubtype, AccountType
from general_ledger.schemas.ledger import (
    JournalEntryCreate,
    JournalLineCreate,
    LedgerAccountCreate,
)
from general_ledger.services.chart_service import (
    ChartOfAccountsService,
    STANDARD_CHART,
    normal_balance_sign,
)
from general_ledger.services.ledger_service import LedgerService


def make_account(service, code, name, account_type, subtype="Current Asset"):
    return service.create_account(LedgerAccountCreate(
        code=code,
        name=name,
        account_type=account_type,
        subtype=subtype,
    ))


class TestNormalBalanceSign:

    def test_debit_normal_types(self):
        assert normal_balance_sign(AccountType.ASSET) == 1
        assert normal_balance_sign(AccountType.EXPENSE) == 1

    def test_credit_normal_types(self):
        assert normal_balance_sign(AccountType.LIABILITY) == -1
        assert normal_balance_sign(AccountType.EQUITY) == -1
        assert normal_balance_sign(AccountType.REVENUE) == -1


class TestCreateAccount:

    def test_new_account_starts_at_zero(self, db_session):
        service = ChartOfAccountsService(db_session)
        account = make_account(service, "1000", "Cash", AccountType.ASSET)
        db_session.commit()

        assert account.id is not None
        assert account.balance == Decimal("0")
        assert account.is_active is True

    def test_duplicate_code_raises(self, db_session):
        service = ChartOfAccountsService(db_session)
        make_account(service, "1000", "Cash", AccountType.ASSET)
        db_session.commit()

        with pytest.raises(DuplicateCodeError):
            make_account(service, "1000", "Petty Cash", AccountType.ASSET)

    def test_duplicate_of_inactive_account_still_raises(self, db_session):
        service = ChartOfAccountsService(db_session)
        account = make_account(service, "1000", "Cash", AccountType.ASSET)
        service.deactivate(account.id)
        db_session.commit()

        with pytest.raises(DuplicateCodeError):
            make_account(service, "1000", "Cash again", AccountType.ASSET)


class TestGetAccount:

    def test_get_by_id_and_by_code(self, db_session):
        service = ChartOfAccountsService(db_session)
        account = make_account(service, "4000", "Sales", AccountType.REVENUE,
                               "Operating Revenue")
        db_session.commit()

        assert service.get_account(account.id).code == "4000"
        assert service.get_account("4000").id == account.id

    def test_unknown_account_raises_not_found(self, db_session):
        service = ChartOfAccountsService(db_session)
        with pytest.raises(NotFoundError):
            service.get_account(999)
        with pytest.raises(NotFoundError):
            service.get_account("9999")

    def test_missing_role_account_is_a_configuration_error(self, db_session):
        service = ChartOfAccountsService(db_session)
        with pytest.raises(AccountCodeNotConfiguredError) as exc_info:
            service.get_by_role("ACCOUNTS_RECEIVABLE")
        assert exc_info.value.account_code == "1100"

    def test_list_filters_by_type(self, seeded_chart):
        service = ChartOfAccountsService(seeded_chart)
        revenue = service.list_accounts(account_type=AccountType.REVENUE)
        assert [a.code for a in revenue] == ["4000", "4100", "4900"]


class TestDeactivate:

    def test_zero_balance_account_can_be_deactivated(self, db_session):
        service = ChartOfAccountsService(db_session)
        account = make_account(service, "1000", "Cash", AccountType.ASSET)
        service.deactivate(account.id)
        db_session.commit()

        assert account.is_active is False
        assert service.list_accounts(active_only=True) == []

    def test_account_with_balance_cannot_be_deactivated(self, seeded_chart):
        ledger = LedgerService(seeded_chart)
        ledger.post_direct(JournalEntryCreate(
            reference="CAP-1",
            description="Owner capital",
            lines=[
                JournalLineCreate(account_code="1010", debit=Decimal("5000")),
                JournalLineCreate(account_code="3000", credit=Decimal("5000")),
            ],
        ))
        seeded_chart.commit()

        bank = ledger.chart.get_account("1010")
        with pytest.raises(HasOpenTransactionsError):
            ledger.chart.deactivate(bank.id)
        assert bank.is_active is True


class TestSeedDefaultChart:

    def test_seed_creates_standard_chart(self, db_session):
        created, skipped = ChartOfAccountsService(db_session).seed_default_chart()
        db_session.commit()

        assert len(created) == len(STANDARD_CHART)
        assert skipped == []

    def test_seed_is_idempotent(self, db_session):
        service = ChartOfAccountsService(db_session)
        service.seed_default_chart()
        db_session.commit()

        created, skipped = service.seed_default_chart()
        assert created == []
        assert len(skipped) == len(STANDARD_CHART)

    def test_seed_keeps_existing_codes(self, db_session):
        service = ChartOfAccountsService(db_session)
        make_account(service, "1000", "Till", AccountType.ASSET, "Cash and Bank")
        db_session.commit()

        created, skipped = service.seed_default_chart()
        assert skipped == ["1000"]
        assert service.get_account("1000").name == "Till"

    def test_seeded_subtypes_drive_reporting(self, seeded_chart):
        service = ChartOfAccountsService(seeded_chart)
        assert service.get_account("1500").subtype == AccountSubtype.FIXED_ASSET.value
        assert service.get_account("2500").subtype == AccountSubtype.LONG_TERM_LIABILITY.value
