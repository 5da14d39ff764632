import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, List, Optional, TextIO

from account import ClientAccount
from models import MAX_AMOUNT, MAX_SCALE, Transaction, TransactionType, ProcessingStats
from transaction_processor import AccountReport, TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class PaymentsEngine:
    """
    Replays a CSV transaction log through a TransactionProcessor.
    Malformed rows and rejected transactions are skipped; the run never aborts on a bad record.
    """

    def __init__(self, processor: Optional[TransactionProcessor] = None):
        self._processor = processor if processor is not None else TransactionProcessor()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states. OSError from opening the file propagates."""
        # undecodable bytes become U+FFFD and fail row parsing instead of aborting the run
        with open(filepath, "r", newline="", errors="replace") as f:
            self._processor.process_all(self._read_transactions(f), self._stats)

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}, "
            f"Skipped: {self._stats.skipped}"
        )
        return self._processor.get_all_accounts()

    def report(self) -> List[AccountReport]:
        return self._processor.report()

    def _read_transactions(self, f: TextIO) -> Iterator[Transaction]:
        """Yield parsed transactions in file order, counting malformed rows."""
        reader = csv.DictReader(f)
        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                # the reader resumes at the next line
                logger.debug(f"Failed to read record at line {reader.line_num}: {e}")
                self._stats.record_skipped()
                continue

            transaction = self._parse_csv_row(row)
            if transaction is None:
                self._stats.record_skipped()
                continue
            yield transaction

    def _parse_csv_row(self, row: Dict[str, str]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            if None in row:
                raise ValueError(f"unexpected extra fields {row[None]}")

            normalized = {k.strip(): v.strip() for k, v in row.items() if v is not None}

            transaction_type = TransactionType(normalized["type"].lower())
            client_id = self._parse_id(normalized["client"], MAX_CLIENT_ID)
            transaction_id = self._parse_id(normalized["tx"], MAX_TRANSACTION_ID)

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str:
                amount = Decimal(amount_str)
                if not amount.is_finite():
                    raise ValueError(f"non-finite amount {amount_str}")
                if amount.copy_abs() > MAX_AMOUNT or amount.as_tuple().exponent < -MAX_SCALE:
                    raise ValueError(f"amount {amount_str} out of range")

            return Transaction(
                transaction_type=transaction_type,
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.debug(f"Failed to parse row {row}: {e}")
            return None

    @staticmethod
    def _parse_id(value: str, upper_bound: int) -> int:
        parsed = int(value)
        if not 0 <= parsed <= upper_bound:
            raise ValueError(f"id {parsed} out of range [0, {upper_bound}]")
        return parsed
