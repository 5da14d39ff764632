import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from account import ClientAccount
from models import ProcessingResult, Transaction
from transaction_processor import AccountReport, TransactionProcessor, round_amount


class TestTransactionProcessor:
    def setup_method(self):
        self.processor = TransactionProcessor()

    def test_deposit(self):
        assert self.processor.process(Transaction.deposit(0, 0, Decimal("1"))) == ProcessingResult.SUCCESS
        assert self.processor.process(Transaction.deposit(1, 1, Decimal("2"))) == ProcessingResult.SUCCESS
        assert self.processor.process(Transaction.deposit(0, 2, Decimal("4"))) == ProcessingResult.SUCCESS

        assert self.processor.get_all_accounts() == {
            0: ClientAccount(client_id=0, available=Decimal("5")),
            1: ClientAccount(client_id=1, available=Decimal("2")),
        }

    def test_failed_first_transaction_creates_no_account(self):
        result = self.processor.process(Transaction.deposit(0, 0, Decimal("-1")))

        assert result == ProcessingResult.FAILED
        assert self.processor.get_all_accounts() == {}

    def test_failed_later_transaction_keeps_account(self):
        self.processor.process(Transaction.deposit(0, 0, Decimal("1")))
        result = self.processor.process(Transaction.withdrawal(0, 1, Decimal("2")))

        assert result == ProcessingResult.FAILED
        assert self.processor.get_all_accounts()[0].available == Decimal("1")

    def test_dispute_unknown_transaction(self):
        result = self.processor.process(Transaction.dispute(1, 99))

        assert result == ProcessingResult.FAILED
        assert self.processor.get_all_accounts() == {}
        assert 99 not in self.processor.ledger

    def test_dispute_by_other_client(self):
        self.processor.process(Transaction.deposit(0, 0, Decimal("5")))

        assert self.processor.process(Transaction.dispute(1, 0)) == ProcessingResult.FAILED
        assert self.processor.get_all_accounts() == {0: ClientAccount(client_id=0, available=Decimal("5"))}

    def test_second_dispute_fails_for_any_client(self):
        self.processor.process(Transaction.deposit(0, 0, Decimal("5")))
        self.processor.process(Transaction.deposit(1, 1, Decimal("5")))

        assert self.processor.process(Transaction.dispute(0, 0)) == ProcessingResult.SUCCESS
        assert self.processor.process(Transaction.dispute(0, 0)) == ProcessingResult.FAILED
        assert self.processor.process(Transaction.dispute(1, 0)) == ProcessingResult.FAILED

    def test_dispute_resolve_chargeback_across_clients(self):
        for client_id, amount in ((0, "5"), (1, "10"), (2, "15")):
            self.processor.process(Transaction.deposit(client_id, client_id, Decimal(amount)))
        self.processor.process(Transaction.dispute(0, 0))
        self.processor.process(Transaction.dispute(1, 1))
        self.processor.process(Transaction.resolve(0, 0))
        self.processor.process(Transaction.chargeback(1, 1))

        assert self.processor.get_all_accounts() == {
            0: ClientAccount(client_id=0, available=Decimal("5")),
            1: ClientAccount(client_id=1, locked=True),
            2: ClientAccount(client_id=2, available=Decimal("15")),
        }

    def test_chargeback_then_resolve(self):
        self.processor.process(Transaction.deposit(0, 0, Decimal("5.0")))
        self.processor.process(Transaction.dispute(0, 0))
        self.processor.process(Transaction.chargeback(0, 0))

        assert self.processor.process(Transaction.resolve(0, 0)) == ProcessingResult.FAILED
        assert self.processor.report() == [
            AccountReport(0, Decimal("0.0000"), Decimal("0.0000"), Decimal("0.0000"), True),
        ]

    def test_duplicate_deposit_id_overwrites_ledger_entry(self):
        self.processor.process(Transaction.deposit(0, 7, Decimal("5")))
        self.processor.process(Transaction.deposit(1, 7, Decimal("3")))

        assert self.processor.process(Transaction.dispute(0, 7)) == ProcessingResult.FAILED
        assert self.processor.process(Transaction.dispute(1, 7)) == ProcessingResult.SUCCESS
        accounts = self.processor.get_all_accounts()
        assert accounts[0].available == Decimal("5")
        assert accounts[1].held == Decimal("3")

    def test_process_all(self):
        stats = self.processor.process_all([
            Transaction.deposit(1, 1, Decimal("1.0")),
            Transaction.withdrawal(1, 2, Decimal("0.5")),
            Transaction.withdrawal(1, 3, Decimal("5")),
            Transaction.dispute(1, 99),
        ])

        assert stats.processed == 2
        assert stats.failed == 2
        assert self.processor.report() == [
            AccountReport(1, Decimal("0.5000"), Decimal("0.0000"), Decimal("0.5000"), False),
        ]

    def test_available_is_deposits_minus_withdrawals(self):
        deposits = [Decimal("1.25"), Decimal("3"), Decimal("0.0001")]
        withdrawals = [Decimal("2"), Decimal("10"), Decimal("0.25")]
        tx = 0
        for amount in deposits:
            self.processor.process(Transaction.deposit(4, tx, amount))
            tx += 1
        accepted = []
        for amount in withdrawals:
            if self.processor.process(Transaction.withdrawal(4, tx, amount)) == ProcessingResult.SUCCESS:
                accepted.append(amount)
            tx += 1

        assert accepted == [Decimal("2"), Decimal("0.25")]
        assert self.processor.get_all_accounts()[4].available == sum(deposits) - sum(accepted)

    def test_report_sorted_by_client(self):
        for client_id in (5, 2, 9):
            self.processor.process(Transaction.deposit(client_id, client_id, Decimal("1")))

        assert [row.client_id for row in self.processor.report()] == [2, 5, 9]


class TestRoundAmount:
    def test_pads_to_four_digits(self):
        assert str(round_amount(Decimal("1.5"))) == "1.5000"
        assert str(round_amount(Decimal("3"))) == "3.0000"

    def test_rounds_extra_digits(self):
        assert str(round_amount(Decimal("2.20994"))) == "2.2099"
        assert str(round_amount(Decimal("2.20996"))) == "2.2100"
        assert str(round_amount(Decimal("0.00005"))) == "0.0000"
        assert str(round_amount(Decimal("0.00015"))) == "0.0002"

    def test_no_negative_zero(self):
        assert str(round_amount(Decimal("-0.00001"))) == "0.0000"

    def test_negative_values(self):
        assert str(round_amount(Decimal("-30"))) == "-30.0000"

    def test_beyond_default_precision(self):
        assert str(round_amount(Decimal("12345678901234567890123456"))) == "12345678901234567890123456.0000"
        assert str(round_amount(Decimal("79228162514264337593543950335.00005"))) == "79228162514264337593543950335.0000"
