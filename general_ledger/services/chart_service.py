"""
Chart of accounts service.

Owns the registry of ledger accounts and the normal-balance
rule. Every other component that needs to know how a debit or
credit moves a balance asks normal_balance_sign(); nothing else
encodes the rule.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.config import get_settings
from general_ledger.exceptions import (
    AccountCodeNotConfiguredError,
    DuplicateCodeError,
    HasOpenTransactionsError,
    NotFoundError,
)
from general_ledger.models.enums import AccountSubtype, AccountType
from general_ledger.models.ledger_account import LedgerAccount
from general_ledger.schemas.ledger import LedgerAccountCreate
from general_ledger.utils.money import to_minor_units

logger = logging.getLogger(__name__)


DEBIT_NORMAL_TYPES = (AccountType.ASSET, AccountType.EXPENSE)


def normal_balance_sign(account_type: AccountType) -> int:
    """
    Multiplier applied to (debit - credit) to get the balance change.

    Assets and expenses grow with debits (+1). Liabilities,
    equity and revenue grow with credits (-1). Balances are
    therefore positive whenever an account sits on its normal side.
    """
    return 1 if account_type in DEBIT_NORMAL_TYPES else -1


# code, name, type, subtype
STANDARD_CHART = [
    ("1000", "Cash on Hand", AccountType.ASSET, AccountSubtype.CASH),
    ("1010", "Bank Account", AccountType.ASSET, AccountSubtype.CASH),
    ("1100", "Accounts Receivable", AccountType.ASSET, AccountSubtype.CURRENT_ASSET),
    ("1200", "Inventory", AccountType.ASSET, AccountSubtype.CURRENT_ASSET),
    ("1300", "Prepaid Expenses", AccountType.ASSET, AccountSubtype.CURRENT_ASSET),
    ("1310", "VAT Input", AccountType.ASSET, AccountSubtype.CURRENT_ASSET),
    ("1500", "Property and Equipment", AccountType.ASSET, AccountSubtype.FIXED_ASSET),
    ("1510", "Motor Vehicles", AccountType.ASSET, AccountSubtype.FIXED_ASSET),
    ("2000", "Accounts Payable", AccountType.LIABILITY, AccountSubtype.CURRENT_LIABILITY),
    ("2100", "VAT Output", AccountType.LIABILITY, AccountSubtype.CURRENT_LIABILITY),
    ("2110", "PAYE Payable", AccountType.LIABILITY, AccountSubtype.CURRENT_LIABILITY),
    ("2120", "Social Security Payable", AccountType.LIABILITY, AccountSubtype.CURRENT_LIABILITY),
    ("2130", "Health Insurance Payable", AccountType.LIABILITY, AccountSubtype.CURRENT_LIABILITY),
    ("2200", "Accrued Expenses", AccountType.LIABILITY, AccountSubtype.CURRENT_LIABILITY),
    ("2500", "Long-term Loan", AccountType.LIABILITY, AccountSubtype.LONG_TERM_LIABILITY),
    ("3000", "Share Capital", AccountType.EQUITY, AccountSubtype.CAPITAL),
    ("3100", "Retained Earnings", AccountType.EQUITY, AccountSubtype.RETAINED_EARNINGS),
    ("3900", "Opening Balance Equity", AccountType.EQUITY, AccountSubtype.CAPITAL),
    ("4000", "Sales Revenue", AccountType.REVENUE, AccountSubtype.OPERATING_REVENUE),
    ("4100", "Service Revenue", AccountType.REVENUE, AccountSubtype.OPERATING_REVENUE),
    ("4900", "Other Income", AccountType.REVENUE, AccountSubtype.OTHER_REVENUE),
    ("5000", "Cost of Goods Sold", AccountType.EXPENSE, AccountSubtype.COST_OF_SALES),
    ("5100", "Salaries and Wages", AccountType.EXPENSE, AccountSubtype.OPERATING_EXPENSE),
    ("5200", "Rent Expense", AccountType.EXPENSE, AccountSubtype.OPERATING_EXPENSE),
    ("5300", "Utilities", AccountType.EXPENSE, AccountSubtype.OPERATING_EXPENSE),
    ("5400", "Office Supplies", AccountType.EXPENSE, AccountSubtype.OPERATING_EXPENSE),
    ("5500", "Marketing", AccountType.EXPENSE, AccountSubtype.OPERATING_EXPENSE),
    ("6000", "Bank Charges", AccountType.EXPENSE, AccountSubtype.FINANCIAL_EXPENSE),
    ("6100", "Interest Expense", AccountType.EXPENSE, AccountSubtype.FINANCIAL_EXPENSE),
]


class ChartOfAccountsService:

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, request: LedgerAccountCreate) -> LedgerAccount:
        """
        Create a new ledger account with a zero balance.

        Raises DuplicateCodeError if the code already exists,
        whether the existing account is active or not.
        """
        existing = self.db.execute(
            select(LedgerAccount).where(LedgerAccount.code == request.code)
        ).scalar_one_or_none()

        if existing:
            raise DuplicateCodeError(request.code)

        account = LedgerAccount(
            code=request.code,
            name=request.name,
            account_type=request.account_type,
            subtype=request.subtype,
            is_active=True,
        )
        self.db.add(account)
        self.db.flush()

        logger.info(
            "account_created code=%s type=%s",
            account.code, account.account_type.value,
        )
        return account

    def get_account(self, id_or_code) -> LedgerAccount:
        """
        Look an account up by id or by code.

        Integers are ids; strings are codes. Raises NotFoundError.
        """
        if isinstance(id_or_code, int):
            account = self.db.get(LedgerAccount, id_or_code)
        else:
            account = self.db.execute(
                select(LedgerAccount).where(
                    LedgerAccount.code == str(id_or_code)
                )
            ).scalar_one_or_none()

        if not account:
            raise NotFoundError("Account", id_or_code)
        return account

    def require_code(self, code: str, role: str | None = None) -> LedgerAccount:
        """
        Fetch an account a workflow depends on.

        A missing well-known account is a deployment fault, so this
        raises AccountCodeNotConfiguredError rather than NotFoundError.
        """
        account = self.db.execute(
            select(LedgerAccount).where(LedgerAccount.code == code)
        ).scalar_one_or_none()

        if not account:
            logger.warning("account_not_configured code=%s role=%s", code, role)
            raise AccountCodeNotConfiguredError(code, role)
        return account

    def get_by_role(self, role: str) -> LedgerAccount:
        """Fetch the account configured for a role such as ``ACCOUNTS_RECEIVABLE``."""
        code = get_settings().account_code(role)
        return self.require_code(code, role)

    def list_accounts(
        self,
        account_type: AccountType | None = None,
        active_only: bool = False,
    ) -> list[LedgerAccount]:
        query = select(LedgerAccount).order_by(LedgerAccount.code)
        if account_type is not None:
            query = query.where(LedgerAccount.account_type == account_type)
        if active_only:
            query = query.where(LedgerAccount.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    def deactivate(self, account_id: int) -> LedgerAccount:
        """
        Soft-deactivate an account.

        Only accounts with a zero balance can be deactivated;
        otherwise HasOpenTransactionsError is raised. The balance
        itself is never touched, and the account's history stays.
        """
        account = self.get_account(account_id)

        if to_minor_units(account.balance) != 0:
            raise HasOpenTransactionsError(
                f"Account {account.code} has a non-zero balance "
                f"({account.balance}) and cannot be deactivated"
            )

        account.is_active = False
        self.db.flush()

        logger.info("account_deactivated code=%s", account.code)
        return account

    def seed_default_chart(self) -> tuple[list[str], list[str]]:
        """
        Provision the standard chart of accounts.

        Idempotent: codes that already exist are skipped.
        Returns (created_codes, skipped_codes).
        """
        existing = set(self.db.execute(select(LedgerAccount.code)).scalars().all())
        created, skipped = [], []

        for code, name, account_type, subtype in STANDARD_CHART:
            if code in existing:
                skipped.append(code)
                continue
            self.db.add(LedgerAccount(
                code=code,
                name=name,
                account_type=account_type,
                subtype=subtype.value,
                is_active=True,
            ))
            created.append(code)

        self.db.flush()
        logger.info("chart_seeded created=%d skipped=%d", len(created), len(skipped))
        return created, skipped
