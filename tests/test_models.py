import pytest
from pydantic import ValidationError

from models import (
    AccountSnapshot,
    Chargeback,
    Deposit,
    Dispute,
    ProcessingSummary,
    Resolve,
    TransactionRecord,
    TransactionType,
    Withdrawal,
    format_amount,
    parse_amount,
)


class TestAmountParsing:
    """Amounts are truncated toward zero to four decimal places on read."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1", 1.0),
            ("1.0", 1.0),
            ("1.12341", 1.1234),
            ("1.12349", 1.1234),
            ("5.7245462362", 5.7245),
            ("  17.64  ", 17.64),
            ("0", 0.0),
            (2.5, 2.5),
        ],
    )
    def test_truncates_to_four_places(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", None, "abc", "1.2.3", "nan", "inf", "-inf", "1e28", "-10000000000000000000000000000"],
    )
    def test_rejects_invalid_amounts(self, raw):
        with pytest.raises(ValueError):
            parse_amount(raw)

    @pytest.mark.parametrize(
        "raw, expected",
        [("-1", -1.0), ("-0.0001", -0.0001), ("-1.23456", -1.2345), ("-5.99999", -5.9999)],
    )
    def test_negative_amounts_truncate_toward_zero(self, raw, expected):
        assert parse_amount(raw) == expected

    def test_negative_below_precision_truncates_to_zero(self):
        assert str(parse_amount("-0.00001")) == "0.0"

    def test_large_amount_parses_and_formats(self):
        amount = parse_amount("999999999999999999999999")

        assert format_amount(amount) == "1000000000000000000000000.0"

    def test_largest_accepted_amount_formats(self):
        amount = parse_amount("9999999999999999999999999999.99999")

        assert format_amount(amount).endswith(".0")
        assert format_amount(-amount).startswith("-")

    @pytest.mark.parametrize("raw", ["0.29", "1.1", "123.4567", "0.0001", "7", "99999.9999"])
    def test_parse_then_format_keeps_value(self, raw):
        assert float(format_amount(parse_amount(raw))) == float(raw)


class TestAmountFormatting:
    """Amounts are rounded half away from zero to four places on write."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (1, "1.0"),
            (1.0, "1.0"),
            (100.0, "100.0"),
            (2.5, "2.5"),
            (1.12341, "1.1234"),
            (1.12349, "1.1235"),
            (1.00005, "1.0001"),
            (-1.00005, "-1.0001"),
            (0.1 + 0.2, "0.3"),
            (-0.0, "0.0"),
            (0.00004, "0.0"),
        ],
    )
    def test_format(self, value, expected):
        assert format_amount(value) == expected


class TestTransactionRecord:
    """Flat input rows become members of the transaction union."""

    def test_deposit_row(self):
        record = TransactionRecord(type="deposit", client="1", tx="2", amount="1.5")
        tx = record.to_transaction()

        assert isinstance(tx, Deposit)
        assert tx.type is TransactionType.deposit
        assert (tx.client, tx.tx, tx.amount) == (1, 2, 1.5)

    def test_withdrawal_amount_is_truncated(self):
        tx = TransactionRecord(type="withdrawal", client=3, tx=4, amount="2.123456").to_transaction()

        assert isinstance(tx, Withdrawal)
        assert tx.amount == 2.1234

    def test_type_tag_is_case_insensitive(self):
        record = TransactionRecord(type=" Deposit ", client=1, tx=1, amount="1")

        assert record.type is TransactionType.deposit

    @pytest.mark.parametrize(
        "type_tag, model",
        [("dispute", Dispute), ("resolve", Resolve), ("chargeback", Chargeback)],
    )
    @pytest.mark.parametrize("amount", [None, "", "0", "12.5"])
    def test_amount_is_dropped_for_dispute_steps(self, type_tag, model, amount):
        tx = TransactionRecord(type=type_tag, client=1, tx=9, amount=amount).to_transaction()

        assert isinstance(tx, model)
        assert tx.tx == 9
        assert not hasattr(tx, "amount")

    @pytest.mark.parametrize("amount", [None, "", "  "])
    def test_deposit_requires_amount(self, amount):
        record = TransactionRecord(type="deposit", client=1, tx=1, amount=amount)

        with pytest.raises(ValidationError):
            record.to_transaction()

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            TransactionRecord(type="bacon", client=1, tx=1, amount="1")

    @pytest.mark.parametrize(
        "client, tx",
        [("-1", "1"), ("65536", "1"), ("1", "-1"), ("1", "4294967296"), ("abc", "1"), ("1", "")],
    )
    def test_identifiers_must_fit_their_ranges(self, client, tx):
        with pytest.raises(ValidationError):
            TransactionRecord(type="deposit", client=client, tx=tx, amount="1")

    def test_identifier_bounds_are_accepted(self):
        tx = TransactionRecord(type="deposit", client="65535", tx="4294967295", amount="1").to_transaction()

        assert (tx.client, tx.tx) == (65535, 4294967295)

    def test_transactions_are_immutable(self):
        tx = Deposit(client=1, tx=1, amount=1.0)

        with pytest.raises(ValidationError):
            tx.amount = 2.0


class TestAccountSnapshot:
    def test_row_formats_amounts_and_lock_flag(self):
        snapshot = AccountSnapshot(client=1, available=1.5, held=0.0, total=1.5, locked=False)

        assert snapshot.to_row() == [1, "1.5", "0.0", "1.5", "false"]

    def test_locked_row(self):
        snapshot = AccountSnapshot(client=2, available=0.30000000000000004, held=1.12345, total=1.42345, locked=True)

        assert snapshot.to_row() == [2, "0.3", "1.1235", "1.4235", "true"]


class TestProcessingSummary:
    def test_rejected_count_sums_error_codes(self):
        summary = ProcessingSummary(applied=3, rejected={"ACCOUNT_LOCKED": 2, "TX_NOT_FOUND": 1})

        assert summary.rejected_count == 3
