"""
Module: snapshot.py
Description: Immutable record values and the snapshot the engine analyzes.

Every report is computed from one Snapshot: six read-only collections plus
the explicit "today" (as_of). Records arrive either as ORM rows
(load_snapshot) or as raw JSON-shaped dicts from the hosted store
(Snapshot.from_records); both paths normalise to the frozen dataclasses
below so analyzers never see joined-category shape differences.

Author: Smart Financial Coach Team
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession, selectinload

from .date_ranges import history_start
from .exceptions import InvalidRecordError, SnapshotLoadError
from .frequencies import normalize_frequency
from .observability import logger, metrics


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float
    date: date
    account_id: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    is_transfer: bool = False
    category_name: Optional[str] = None
    category_type: Optional[str] = None

    @property
    def is_expense(self) -> bool:
        return self.amount < 0 and not self.is_transfer

    @property
    def is_income(self) -> bool:
        return self.amount > 0 and not self.is_transfer


@dataclass(frozen=True)
class Budget:
    id: str
    category_id: str
    amount: float
    period: str = "monthly"
    category_name: Optional[str] = None


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target_amount: float
    current_amount: float = 0.0
    target_date: Optional[date] = None
    is_completed: bool = False
    created_at: Optional[datetime] = None

    @property
    def progress(self) -> float:
        """Percent of target saved; 0 when the target is not positive."""
        if self.target_amount <= 0:
            return 0.0
        return self.current_amount / self.target_amount * 100


@dataclass(frozen=True)
class Bill:
    id: str
    name: str
    frequency: str
    next_due_date: date
    amount: Optional[float] = None  # None = variable amount
    is_active: bool = True


@dataclass(frozen=True)
class RecurringTransaction:
    id: str
    description: str
    amount: float
    frequency: str


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str = "checking"
    balance: float = 0.0


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of one user's records."""
    as_of: date
    transactions: tuple = ()
    budgets: tuple = ()
    goals: tuple = ()
    bills: tuple = ()
    accounts: tuple = ()
    recurring_transactions: tuple = ()
    user_id: Optional[str] = None
    skipped_records: int = field(default=0, compare=False)

    @property
    def current_balance(self) -> float:
        return sum(a.balance for a in self.accounts)

    @classmethod
    def from_records(
        cls,
        as_of: Any,
        transactions: Iterable[dict] = (),
        budgets: Iterable[dict] = (),
        goals: Iterable[dict] = (),
        bills: Iterable[dict] = (),
        accounts: Iterable[dict] = (),
        recurring_transactions: Iterable[dict] = (),
        user_id: Optional[str] = None,
    ) -> "Snapshot":
        """
        Build a snapshot from raw dict records.

        A malformed record is logged and skipped; it never fails the
        snapshot as a whole.

        Args:
            as_of: The report date (date, datetime or ISO string).
            transactions..recurring_transactions: Raw records as dicts.
            user_id: Owner, only used for log context.
        """
        as_of_date = parse_date(as_of)
        if as_of_date is None:
            raise InvalidRecordError(f"Invalid as_of date: {as_of!r}")

        skipped = 0

        def build(kind: str, records: Iterable[dict], factory) -> tuple:
            nonlocal skipped
            built = []
            for record in records or ():
                try:
                    built.append(factory(record))
                except (InvalidRecordError, KeyError, TypeError, ValueError) as e:
                    skipped += 1
                    metrics.increment("snapshot.skipped_records", tags={"kind": kind})
                    logger.warning("Skipping malformed record", kind=kind,
                                   record_id=_get(record, "id"), error=str(e))
            return tuple(built)

        return cls(
            as_of=as_of_date,
            transactions=build("transaction", transactions, transaction_from_record),
            budgets=build("budget", budgets, budget_from_record),
            goals=build("goal", goals, goal_from_record),
            bills=build("bill", bills, bill_from_record),
            accounts=build("account", accounts, account_from_record),
            recurring_transactions=build(
                "recurring_transaction", recurring_transactions, recurring_from_record
            ),
            user_id=user_id,
            skipped_records=skipped,
        )


# =============================================================================
# Raw Record Normalisation
# =============================================================================

def _get(record: Any, key: str, default: Any = None) -> Any:
    if isinstance(record, dict):
        return record.get(key, default)
    return getattr(record, key, default)


def parse_date(value: Any) -> Optional[date]:
    """Parse a date/datetime/ISO string; None when missing or unparsable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip().replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            parsed = parse_date(text)
            return datetime(parsed.year, parsed.month, parsed.day) if parsed else None
    return None


def parse_amount(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidRecordError(f"Invalid amount: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidRecordError(f"Invalid amount: {value!r}")


def normalize_category(payload: Any) -> Optional[dict]:
    """
    Collapse a joined category payload to one optional record.

    The hosted store returns joined rows either as an object or as a list
    of objects; the first element of a list wins.
    """
    if not payload:
        return None
    if isinstance(payload, (list, tuple)):
        return normalize_category(payload[0]) if payload else None
    if isinstance(payload, dict):
        return payload
    return {"name": _get(payload, "name"), "type": _get(payload, "type")}


def _required_amount(record: Any, key: str = "amount") -> float:
    parsed = parse_amount(_get(record, key))
    if parsed is None:
        raise InvalidRecordError(f"Missing {key}")
    return parsed


def _required_date(record: Any, key: str) -> date:
    parsed = parse_date(_get(record, key))
    if parsed is None:
        raise InvalidRecordError(f"Invalid {key}: {_get(record, key)!r}")
    return parsed


def _id(record: Any) -> str:
    value = _get(record, "id")
    if value is None:
        raise InvalidRecordError("Record has no id")
    return str(value)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _text(value: Any, key: str) -> Optional[str]:
    """Free-text field: a string or missing. Anything else rejects the record."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidRecordError(f"Invalid {key}: {value!r}")
    return value


def _category_field(record: Any, category: Optional[dict], key: str) -> Optional[str]:
    """Flattened category_<key> on the record, else the joined category's <key>."""
    return _text(_get(record, f"category_{key}") or (category or {}).get(key), f"category {key}")


def transaction_from_record(record: Any) -> Transaction:
    category = normalize_category(_get(record, "categories") or _get(record, "category"))
    return Transaction(
        id=_id(record),
        amount=_required_amount(record),
        date=_required_date(record, "date"),
        account_id=_optional_str(_get(record, "account_id")),
        description=_text(_get(record, "description"), "description"),
        category_id=_optional_str(_get(record, "category_id")),
        is_transfer=bool(_get(record, "is_transfer", False)),
        category_name=_category_field(record, category, "name"),
        category_type=_category_field(record, category, "type"),
    )


def budget_from_record(record: Any) -> Budget:
    category = normalize_category(_get(record, "categories") or _get(record, "category"))
    return Budget(
        id=_id(record),
        category_id=str(_get(record, "category_id")),
        amount=parse_amount(_get(record, "amount"), 0.0),
        period=_text(_get(record, "period"), "period") or "monthly",
        category_name=_category_field(record, category, "name"),
    )


def goal_from_record(record: Any) -> Goal:
    # Unparsable target dates fall back to the no-target-date path
    return Goal(
        id=_id(record),
        name=_text(_get(record, "name"), "name") or "",
        target_amount=parse_amount(_get(record, "target_amount"), 0.0),
        current_amount=parse_amount(_get(record, "current_amount"), 0.0),
        target_date=parse_date(_get(record, "target_date")),
        is_completed=bool(_get(record, "is_completed", False)),
        created_at=parse_datetime(_get(record, "created_at")),
    )


def bill_from_record(record: Any) -> Bill:
    return Bill(
        id=_id(record),
        name=_text(_get(record, "name"), "name") or "",
        frequency=normalize_frequency(_text(_get(record, "frequency"), "frequency")) or "monthly",
        next_due_date=_required_date(record, "next_due_date"),
        amount=parse_amount(_get(record, "amount")),
        is_active=bool(_get(record, "is_active", True)),
    )


def recurring_from_record(record: Any) -> RecurringTransaction:
    return RecurringTransaction(
        id=_id(record),
        description=_text(_get(record, "description"), "description") or "",
        amount=_required_amount(record),
        frequency=normalize_frequency(_text(_get(record, "frequency"), "frequency")) or "monthly",
    )


def account_from_record(record: Any) -> Account:
    return Account(
        id=_id(record),
        name=_text(_get(record, "name"), "name") or "",
        type=_get(record, "type") or "checking",
        balance=parse_amount(_get(record, "balance"), 0.0),
    )


# =============================================================================
# Database Loader
# =============================================================================

def load_snapshot(db: DBSession, user_id: str, as_of: Optional[date] = None) -> Snapshot:
    """
    Read one user's records into a Snapshot.

    Transactions are limited to the three-month history window and ordered
    newest first; recurring transactions are limited to active rows.

    Raises:
        SnapshotLoadError: If any query fails.
    """
    from models import (
        Account as AccountRow, Bill as BillRow, Budget as BudgetRow,
        Goal as GoalRow, RecurringTransaction as RecurringRow,
        Transaction as TransactionRow,
    )

    as_of = as_of or date.today()

    try:
        transactions = db.scalars(
            select(TransactionRow)
            .options(selectinload(TransactionRow.category))
            .where(TransactionRow.user_id == user_id)
            .where(TransactionRow.date >= history_start(as_of))
            .order_by(TransactionRow.date.desc(), TransactionRow.id)
        ).all()
        budgets = db.scalars(
            select(BudgetRow)
            .options(selectinload(BudgetRow.category))
            .where(BudgetRow.user_id == user_id)
        ).all()
        goals = db.scalars(select(GoalRow).where(GoalRow.user_id == user_id)).all()
        bills = db.scalars(select(BillRow).where(BillRow.user_id == user_id)).all()
        accounts = db.scalars(select(AccountRow).where(AccountRow.user_id == user_id)).all()
        recurring = db.scalars(
            select(RecurringRow)
            .where(RecurringRow.user_id == user_id)
            .where(RecurringRow.is_active.is_(True))
        ).all()
    except SQLAlchemyError as e:
        metrics.increment("snapshot.load_failed")
        logger.error("Snapshot load failed", user_id=user_id[:8], error=str(e))
        raise SnapshotLoadError(f"Failed to load records: {e}") from e

    return Snapshot.from_records(
        as_of=as_of,
        transactions=[
            {
                "id": t.id,
                "amount": t.amount,
                "date": t.date,
                "description": t.description,
                "category_id": t.category_id,
                "account_id": t.account_id,
                "is_transfer": t.is_transfer,
                "categories": t.category,
            }
            for t in transactions
        ],
        budgets=[
            {
                "id": b.id,
                "category_id": b.category_id,
                "amount": b.amount,
                "period": b.period,
                "categories": b.category,
            }
            for b in budgets
        ],
        goals=goals,
        bills=bills,
        accounts=accounts,
        recurring_transactions=recurring,
        user_id=user_id,
    )
