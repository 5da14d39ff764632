from typing import Dict, Optional

from models import TransactionRecord


class Ledger:
    """
    Deposit history keyed by transaction id.
    Holds no business rules; accounts read and mutate the stored records.
    """

    def __init__(self):
        self._records: Dict[int, TransactionRecord] = {}

    def insert(self, transaction_id: int, record: TransactionRecord) -> None:
        """Store record, replacing any earlier entry with the same id."""
        self._records[transaction_id] = record

    def get(self, transaction_id: int) -> Optional[TransactionRecord]:
        """
        Retrieve stored record by ID.
        The record is returned by reference so callers can update its dispute state.
        """
        return self._records.get(transaction_id)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._records

    def __len__(self) -> int:
        return len(self._records)
