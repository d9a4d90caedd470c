"""Credit-card statement import service."""

import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from cardrecon.database.base import Database
from cardrecon.domain.billing_cycle import billing_cycle_for_date, normalize_billing_cycle
from cardrecon.domain.errors import ConflictError, ValidationError
from cardrecon.domain.matching_config import MatchingConfig, DEFAULT_MATCHING_CONFIG
from cardrecon.domain.reconciliation import ReconciliationResult, ReconciliationService
from cardrecon.domain.transaction import TransactionService
from cardrecon.utils.amount_parser import parse_amount
from cardrecon.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

PAYMENT_RECEIVED_RE = re.compile(r"^\s*(pagamento\s+recebido|payment\s+received)\b", re.IGNORECASE)


@dataclass(frozen=True)
class StatementLine:
    """One already-parsed line of a credit-card statement.

    The amount is as printed on the card statement: purchases positive,
    refunds and payments negative.
    """

    date: date
    title: str
    amount: Decimal
    billing_cycle: Optional[str] = None


@dataclass
class ImportResult:
    """Outcome of importing a statement."""

    imported_count: int = 0
    skipped_payment_count: int = 0
    transaction_ids: list[int] = field(default_factory=list)
    billing_cycles: list[str] = field(default_factory=list)
    reconciliation: ReconciliationResult = field(default_factory=ReconciliationResult)


def is_payment_received(title: str) -> bool:
    """Return True for the statement line acknowledging the previous bill payment."""
    return PAYMENT_RECEIVED_RE.search(title or "") is not None


class CreditCardImportService:
    """Stores parsed statement lines and reconciles the touched cycles."""

    def __init__(self, db: Database, config: MatchingConfig = DEFAULT_MATCHING_CONFIG):
        """Initialize import service.

        Args:
            db: Database instance
            config: Matching policy for the post-import reconciliation
        """
        self.db = db
        self.config = config
        self.transactions = TransactionService(db, config)
        self.reconciliation = ReconciliationService(db, config)

    def import_transactions(
        self,
        user_id: int,
        lines: list[StatementLine],
        billing_cycle: Optional[str] = None,
        reconcile: bool = True,
    ) -> ImportResult:
        """Import statement lines as unlinked credit-card transactions.

        Args:
            user_id: Owner
            lines: Parsed statement lines
            billing_cycle: Cycle applied to every line lacking its own; derived
                from each line's date when omitted
            reconcile: Run reconciliation for each touched cycle afterwards

        Returns:
            ImportResult

        Raises:
            ValidationError: If there is nothing to import
            InvalidBillingCycleError: If a cycle key is malformed
        """
        if not lines:
            raise ValidationError("Statement has no lines to import")
        default_cycle = normalize_billing_cycle(billing_cycle) if billing_cycle is not None else None

        result = ImportResult()
        touched: list[str] = []
        for line in lines:
            if is_payment_received(line.title):
                result.skipped_payment_count += 1
                continue

            cycle = line.billing_cycle or default_cycle or billing_cycle_for_date(line.date)
            # Statement purchases are positive; stored as outflows
            transaction_id = self.transactions.create_credit_card_transaction(
                user_id=user_id,
                date=line.date,
                title=line.title,
                amount=-line.amount,
                billing_cycle=cycle,
            )
            result.transaction_ids.append(transaction_id)
            result.imported_count += 1
            cycle = normalize_billing_cycle(cycle)
            if cycle not in touched:
                touched.append(cycle)

        result.billing_cycles = sorted(touched)
        logger.info(
            "Imported %d credit card transaction(s) into %d cycle(s), skipped %d payment line(s)",
            result.imported_count,
            len(touched),
            result.skipped_payment_count,
        )

        if reconcile:
            for cycle in result.billing_cycles:
                try:
                    result.reconciliation.merge(self.reconciliation.reconcile(user_id, cycle))
                except ConflictError as e:
                    logger.warning("Reconciliation of cycle %s after import skipped: %s", cycle, e)

        return result


STATEMENT_COLUMNS = ("date", "title", "amount")


def read_statement_csv(csv_file_path: str) -> tuple[list[StatementLine], list[str]]:
    """Read a statement CSV with date, title and amount columns.

    An optional billing_cycle column overrides the cycle derived from the date.
    Unparseable rows are reported, not raised.

    Returns:
        Tuple of (parsed lines, per-row error messages)

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If required columns are missing
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    lines = []
    errors = []
    with open(csv_path, "r", encoding="utf-8-sig") as f:
        sample = f.read(1024)
        f.seek(0)
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
        except csv.Error:
            delimiter = ","

        reader = csv.DictReader(f, delimiter=delimiter)
        if reader.fieldnames is None:
            raise ValidationError("CSV file has no columns")
        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        missing = [c for c in STATEMENT_COLUMNS if c not in columns]
        if missing:
            raise ValidationError(f"CSV file missing required columns: {', '.join(missing)}")

        for row_num, row in enumerate(reader, start=2):
            values = {key: (row.get(name) or "").strip() for key, name in columns.items()}
            if not values["date"] or not values["title"] or not values["amount"]:
                errors.append(f"Row {row_num}: Missing date, title or amount")
                continue
            try:
                lines.append(
                    StatementLine(
                        date=parse_date(values["date"]),
                        title=values["title"],
                        amount=parse_amount(values["amount"]),
                        billing_cycle=values.get("billing_cycle") or None,
                    )
                )
            except ValueError as e:
                errors.append(f"Row {row_num}: {e}")

    return lines, errors
