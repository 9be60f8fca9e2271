"""CSV boundary: transaction records in, account snapshots out."""

import csv
from typing import IO, Iterable, Iterator, List, Optional

import structlog
from pydantic import ValidationError

from exceptions import InputSourceError, MalformedRecordError, OutputError
from models import AccountSnapshot, Transaction, TransactionRecord

logger = structlog.get_logger("ledger.records")

REQUIRED_INPUT_FIELDS = frozenset({"type", "client", "tx"})
OUTPUT_FIELDS = ("client", "available", "held", "total", "locked")


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in error.errors()
    )


def parse_header(header: List[str]) -> List[str]:
    fields = [name.strip().lower() for name in header]
    missing = REQUIRED_INPUT_FIELDS.difference(fields)
    if missing:
        raise MalformedRecordError(f"header is missing {', '.join(sorted(missing))}", line=1)
    return fields


def parse_record(fields: List[str], row: List[str], line: Optional[int] = None) -> Transaction:
    """Decode one CSV row into a transaction.

    Cells are trimmed. Trailing cells may be left out, which is how dispute,
    resolve and chargeback rows usually drop their amount.
    """
    if len(row) > len(fields):
        raise MalformedRecordError(f"expected at most {len(fields)} fields, got {len(row)}", line=line)

    data = {name: cell.strip() for name, cell in zip(fields, row)}
    try:
        return TransactionRecord.model_validate(data).to_transaction()
    except ValidationError as e:
        raise MalformedRecordError(_describe(e), line=line) from e


def read_transactions(path) -> Iterator[Transaction]:
    """Lazily yield the transactions stored in the CSV file at ``path``."""
    try:
        file = open(path, newline="", encoding="utf-8-sig")
    except OSError as e:
        raise InputSourceError(f"cannot open {path}: {e.strerror or e}") from e

    with file:
        reader = csv.reader(file)
        try:
            header = next(reader, None)
            if header is None:
                raise MalformedRecordError("missing header row", line=1)
            fields = parse_header(header)
            logger.debug("Reading transactions", path=str(path), fields=fields)

            for row in reader:
                if not any(cell.strip() for cell in row):
                    continue
                yield parse_record(fields, row, line=reader.line_num)
        except (csv.Error, UnicodeDecodeError) as e:
            raise MalformedRecordError(str(e), line=reader.line_num) from e
        except OSError as e:
            raise InputSourceError(f"cannot read {path}: {e}") from e


def write_snapshot(snapshots: Iterable[AccountSnapshot], stream: IO[str]) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    try:
        writer.writerow(OUTPUT_FIELDS)
        for snapshot in snapshots:
            writer.writerow(snapshot.to_row())
        stream.flush()
    except OSError as e:
        raise OutputError(f"cannot write account snapshot: {e}") from e
