"""
Upload parsing — spreadsheet rows to MovementLines.

Reads .xlsx/.xls/.csv uploads with pandas, matches headers loosely, and
validates every row against the MovementRow schema. Rows are numbered 1..N
in file order; that number is the one every report and message refers to.

Usage:
    from stockflow.parsing import read_batch

    lines = read_batch(request.FILES["file"])
    report = movements.validate(lines, "inbound", category="SU")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Iterable, Mapping

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stockflow.exceptions import BatchFormatError
from stockflow.models.movement import CONDITION_MAX_LENGTH, REASON_MAX_LENGTH
from stockflow.records import MovementLine

logger = logging.getLogger('stockflow')

# Lower-cased header -> schema alias
HEADER_ALIASES = {
    'sku': 'SKU',
    'product sku': 'SKU',
    'item sku': 'SKU',
    'quantity': 'Quantity',
    'qty': 'Quantity',
    'units': 'Quantity',
    'reason': 'Reason',
    'return reason': 'Reason',
    'condition': 'Condition',
}
REQUIRED_COLUMNS = ('SKU', 'Quantity')

EXCEL_SUFFIXES = {'.xlsx', '.xls'}
CSV_SUFFIXES = {'.csv'}


class MovementRow(BaseModel):
    """
    Data contract for one uploaded row.
    Aliases are the template's column headers.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    sku: str = Field(..., alias='SKU', min_length=1)
    quantity: int = Field(..., alias='Quantity')
    reason: str | None = Field(default=None, alias='Reason', max_length=REASON_MAX_LENGTH)
    condition: str | None = Field(default=None, alias='Condition', max_length=CONDITION_MAX_LENGTH)

    @field_validator('sku', 'reason', 'condition', mode='before')
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        # Spreadsheets hand back numeric-looking codes as numbers
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, int):
            value = str(value)
        return value

    @field_validator('reason', 'condition')
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator('quantity', mode='before')
    @classmethod
    def _whole_number(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip().replace(',', '')
            try:
                number = float(text)
            except ValueError:
                return value
            if number.is_integer():
                return int(number)
        return value

    def to_line(self, row: int) -> MovementLine:
        return MovementLine(
            row=row,
            sku=self.sku,
            quantity=self.quantity,
            reason=self.reason,
            condition=self.condition,
        )


def normalize_header(header: Any) -> str:
    """Map a raw column header to its schema alias (unknown headers pass through)."""
    text = str(header).strip()
    return HEADER_ALIASES.get(text.lower(), text)


def lines_from_records(records: Iterable[Mapping[str, Any]]) -> list[MovementLine]:
    """
    Build MovementLines from row dicts (JSON bodies, DataFrame records).

    Raises:
        BatchFormatError: One entry in .errors per offending field
    """
    lines: list[MovementLine] = []
    errors: list[dict[str, Any]] = []

    for row, record in enumerate(records, start=1):
        data = {normalize_header(k): v for k, v in record.items()}
        try:
            lines.append(MovementRow.model_validate(data).to_line(row))
        except ValidationError as e:
            for err in e.errors():
                errors.append({
                    'row': row,
                    'field': '.'.join(str(part) for part in err['loc']),
                    'message': err['msg'],
                })

    if errors:
        raise BatchFormatError(
            message=f"{len({e['row'] for e in errors})} row(s) could not be read",
            errors=errors,
        )
    return lines


def load_frame(source: str | Path | IO, filename: str | None = None) -> pd.DataFrame:
    """
    Read an upload into a DataFrame of text cells.

    Cells are read as text so SKUs keep leading zeros; empty cells become None
    and fully blank rows are dropped.
    """
    name = filename or getattr(source, 'name', None) or str(source)
    suffix = Path(name).suffix.lower()

    if suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(source, dtype=str)
    elif suffix in CSV_SUFFIXES:
        try:
            df = pd.read_csv(source, dtype=str, encoding='utf-8-sig')
        except UnicodeDecodeError:
            logger.info("UTF-8 decoding failed for %s, retrying with latin-1", name)
            if hasattr(source, 'seek'):
                source.seek(0)
            df = pd.read_csv(source, dtype=str, encoding='latin-1')
    else:
        raise BatchFormatError(
            message=f"Unsupported file type '{suffix or name}'",
            filename=name,
        )

    df = df.dropna(how='all')
    df = df.rename(columns=normalize_header)
    return df.astype(object).where(df.notna(), None)


def read_batch(source: str | Path | IO, filename: str | None = None) -> list[MovementLine]:
    """
    Read a spreadsheet upload into MovementLines.

    Args:
        source: Path or file-like object (e.g. a Django UploadedFile)
        filename: Name used to pick the reader when source has none

    Returns:
        One MovementLine per non-blank data row, rows numbered from 1

    Raises:
        BatchFormatError: Unsupported file, missing required columns,
            or rows that don't match the template
    """
    df = load_frame(source, filename)

    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise BatchFormatError(
            message=f"Missing required column(s): {', '.join(missing)}",
            missing=missing,
        )

    lines = lines_from_records(df.to_dict('records'))
    logger.info("Read %d movement line(s) from %s", len(lines), filename or getattr(source, 'name', source))
    return lines
