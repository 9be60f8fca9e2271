from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, field_serializer, field_validator
from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Union
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP, localcontext


DECIMAL_PLACES = 4
AMOUNT_QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)
MAX_AMOUNT = Decimal(10) ** 28

MAX_CLIENT_ID = 2**16 - 1
MAX_TX_ID = 2**32 - 1


def _quantize(amount: Decimal, rounding: str) -> Decimal:
    # the default 28 digit context cannot hold large integers plus 4 decimals
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + DECIMAL_PLACES + 2)
        return amount.quantize(AMOUNT_QUANTUM, rounding=rounding)


def parse_amount(value) -> float:
    """Parse a decimal numeral, truncating toward zero to DECIMAL_PLACES.

    Negative amounts are accepted and applied as given.
    """
    if isinstance(value, str):
        value = value.strip()
    if value is None or value == "":
        raise ValueError("amount is required")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"amount must be finite, got {value!r}")
    if amount.copy_abs() >= MAX_AMOUNT:
        raise ValueError(f"amount out of range, got {value!r}")

    amount = _quantize(amount, ROUND_DOWN)
    if amount == 0:
        # "-0.00001" truncates to -0.0000
        amount = amount.copy_abs()
    return float(amount)


def format_amount(value: float) -> str:
    """Round half away from zero to DECIMAL_PLACES, keeping at least one fractional digit."""
    rounded = _quantize(Decimal(str(value)), ROUND_HALF_UP)
    if rounded == 0:
        rounded = rounded.copy_abs()
    text = format(rounded, "f").rstrip("0")
    if text.endswith("."):
        text += "0"
    return text


ClientId = Annotated[int, Field(ge=0, le=MAX_CLIENT_ID)]
TransactionId = Annotated[int, Field(ge=0, le=MAX_TX_ID)]
Amount = Annotated[float, BeforeValidator(parse_amount)]


class TransactionType(str, Enum):
    deposit = "deposit"
    withdrawal = "withdrawal"
    dispute = "dispute"
    resolve = "resolve"
    chargeback = "chargeback"


MONETARY_TYPES = frozenset({TransactionType.deposit, TransactionType.withdrawal})


class _TransactionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    client: ClientId = Field(..., description="Client the transaction belongs to")
    tx: TransactionId = Field(..., description="Transaction identifier, unique across the stream")


class Deposit(_TransactionBase):
    type: Literal[TransactionType.deposit] = TransactionType.deposit
    amount: Amount


class Withdrawal(_TransactionBase):
    type: Literal[TransactionType.withdrawal] = TransactionType.withdrawal
    amount: Amount


class Dispute(_TransactionBase):
    """Claim against an earlier deposit or withdrawal, referenced by ``tx``."""

    type: Literal[TransactionType.dispute] = TransactionType.dispute


class Resolve(_TransactionBase):
    type: Literal[TransactionType.resolve] = TransactionType.resolve


class Chargeback(_TransactionBase):
    type: Literal[TransactionType.chargeback] = TransactionType.chargeback


Transaction = Annotated[
    Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback],
    Field(discriminator="type"),
]
StoredTransaction = Annotated[Union[Deposit, Withdrawal], Field(discriminator="type")]

transaction_adapter = TypeAdapter(Transaction)


class DisputableTransaction(BaseModel):
    """A deposit or withdrawal kept in an account's history."""

    transaction: StoredTransaction
    disputed: bool = False


class TransactionRecord(BaseModel):
    """Flat row as it appears in the input stream."""

    type: TransactionType = Field(..., description="Transaction type tag")
    client: ClientId
    tx: TransactionId
    amount: Optional[str] = Field(None, description="Ignored for dispute, resolve and chargeback")

    @field_validator('type', mode='before')
    def normalize_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('amount', mode='before')
    def blank_amount_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def to_transaction(self) -> Transaction:
        data = {"type": self.type, "client": self.client, "tx": self.tx}
        if self.type in MONETARY_TYPES:
            data["amount"] = self.amount
        return transaction_adapter.validate_python(data)


class AccountSnapshot(BaseModel):
    client: ClientId = Field(..., description="Client identifier")
    available: float = Field(..., description="Funds the client may withdraw")
    held: float = Field(..., description="Funds frozen by open disputes")
    total: float = Field(..., description="available + held")
    locked: bool = Field(..., description="Set permanently by a chargeback")

    @field_serializer('available', 'held', 'total')
    def serialize_amount(self, value: float) -> str:
        return format_amount(value)

    def to_row(self) -> list:
        data = self.model_dump()
        return [
            data["client"],
            data["available"],
            data["held"],
            data["total"],
            "true" if data["locked"] else "false",
        ]


class ProcessingSummary(BaseModel):
    applied: int = Field(0, description="Transactions applied successfully")
    rejected: Dict[str, int] = Field(default_factory=dict, description="Rejections per error code")
    accounts_count: int = Field(0, description="Number of accounts in the ledger")

    @property
    def rejected_count(self) -> int:
        return sum(self.rejected.values())
