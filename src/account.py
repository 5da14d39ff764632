import logging
from dataclasses import dataclass
from decimal import Decimal, Inexact, localcontext
from typing import Optional

from ledger import Ledger
from models import LEDGER_CONTEXT, DisputeState, ProcessingResult, Transaction, TransactionRecord, TransactionType

logger = logging.getLogger(__name__)


@dataclass
class ClientAccount:
    """
    Balances for a single client.
    Applies transactions against itself and the shared ledger passed in by the caller.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        with localcontext(LEDGER_CONTEXT):
            return self.available + self.held

    def apply(self, transaction: Transaction, ledger: Ledger) -> ProcessingResult:
        """
        Apply a single transaction.

        Returns:
            SUCCESS: Balances (and the ledger entry, for dispute workflow types) were updated
            FAILED: Nothing changed, except that a rejected deposit still occupies its ledger slot
        """
        if transaction.transaction_type == TransactionType.DEPOSIT:
            ledger.insert(
                transaction.transaction_id,
                TransactionRecord(amount=transaction.amount, client_id=transaction.client_id),
            )

        with localcontext(LEDGER_CONTEXT):
            try:
                return self._dispatch(transaction, ledger)
            except Inexact:
                logger.debug(f"{transaction}: balance arithmetic would lose precision")
                return ProcessingResult.FAILED

    def _dispatch(self, transaction: Transaction, ledger: Ledger) -> ProcessingResult:
        # handlers compute every new balance before assigning any, so a trapped operation changes nothing
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction, ledger)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction, ledger)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction, ledger)

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount < 0:
            logger.debug(f"Deposit tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return ProcessingResult.FAILED

        self.available += transaction.amount
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount < 0:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return ProcessingResult.FAILED

        if self.available < transaction.amount:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({self.available} < {transaction.amount})")
            return ProcessingResult.FAILED

        self.available -= transaction.amount
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, transaction: Transaction, ledger: Ledger) -> ProcessingResult:
        original = self._lookup(transaction, ledger, DisputeState.UNDISPUTED)
        if original is None:
            return ProcessingResult.FAILED

        # no floor check: a dispute after a withdrawal can leave available negative
        available = self.available - original.amount
        held = self.held + original.amount
        self.available, self.held = available, held
        original.dispute_state = DisputeState.DISPUTED
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, transaction: Transaction, ledger: Ledger) -> ProcessingResult:
        original = self._lookup(transaction, ledger, DisputeState.DISPUTED)
        if original is None:
            return ProcessingResult.FAILED

        held = self.held - original.amount
        available = self.available + original.amount
        self.available, self.held = available, held
        original.dispute_state = DisputeState.RESOLVED
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Transaction, ledger: Ledger) -> ProcessingResult:
        original = self._lookup(transaction, ledger, DisputeState.DISPUTED)
        if original is None:
            return ProcessingResult.FAILED

        self.held -= original.amount
        self.locked = True
        original.dispute_state = DisputeState.CHARGEBACKED
        return ProcessingResult.SUCCESS

    @staticmethod
    def _lookup(transaction: Transaction, ledger: Ledger, expected_state: DisputeState) -> Optional[TransactionRecord]:
        """Get the referenced ledger entry if it exists, belongs to the same client and is in expected_state."""
        kind = transaction.transaction_type.value.capitalize()
        original = ledger.get(transaction.transaction_id)

        if original is None:
            logger.debug(f"{kind} for tx {transaction.transaction_id}: transaction not found")
            return None

        if original.client_id != transaction.client_id:
            logger.debug(f"{kind} for tx {transaction.transaction_id}: client mismatch (expected {original.client_id}, got {transaction.client_id})")
            return None

        if original.dispute_state != expected_state:
            logger.debug(f"{kind} for tx {transaction.transaction_id}: transaction is {original.dispute_state.value}, expected {expected_state.value}")
            return None

        return original
