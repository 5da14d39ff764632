import logging
from dataclasses import dataclass
from decimal import Decimal, Inexact, ROUND_HALF_EVEN, localcontext
from typing import Dict, Iterable, List, Optional

from account import ClientAccount
from ledger import Ledger
from models import LEDGER_CONTEXT, ProcessingResult, ProcessingStats, Transaction

logger = logging.getLogger(__name__)

REPORT_PRECISION = Decimal("0.0001")

# same precision as the ledger, but rounding to REPORT_PRECISION is expected here
REPORT_CONTEXT = LEDGER_CONTEXT.copy()
REPORT_CONTEXT.traps[Inexact] = False


@dataclass(frozen=True)
class AccountReport:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


def round_amount(value: Decimal) -> Decimal:
    """Round to the 4 fractional digits used in reports."""
    with localcontext(REPORT_CONTEXT):
        rounded = value.quantize(REPORT_PRECISION, rounding=ROUND_HALF_EVEN)
    # never report "-0.0000"
    return rounded if rounded else rounded.copy_abs()


class TransactionProcessor:
    """
    Owns the account table and the ledger, and routes transactions to accounts.
    Transactions must be fed in input order; dispute validity depends on it.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._ledger = Ledger()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def process(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        A client seen for the first time only gets an account if this transaction succeeds.
        """
        account = self._accounts.get(transaction.client_id)
        if account is not None:
            return account.apply(transaction, self._ledger)

        account = ClientAccount(client_id=transaction.client_id)
        result = account.apply(transaction, self._ledger)
        if result == ProcessingResult.SUCCESS:
            self._accounts[transaction.client_id] = account
        return result

    def process_all(self, transactions: Iterable[Transaction], stats: Optional[ProcessingStats] = None) -> ProcessingStats:
        """Apply transactions in order, discarding failures."""
        if stats is None:
            stats = ProcessingStats()
        for transaction in transactions:
            result = self.process(transaction)
            if result == ProcessingResult.SUCCESS:
                stats.record_success()
            else:
                stats.record_failure()
                logger.debug(f"Discarding failed transaction: {transaction}")
        return stats

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def report(self) -> List[AccountReport]:
        """Build one report row per account, sorted by client id."""
        with localcontext(REPORT_CONTEXT):
            return [
                AccountReport(
                    client_id=client_id,
                    available=round_amount(account.available),
                    held=round_amount(account.held),
                    total=round_amount(account.total),
                    locked=account.locked,
                )
                for client_id, account in sorted(self._accounts.items())
            ]
