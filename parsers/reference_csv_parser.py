"""
Reference CSV parser.

Reads an operator-supplied inventory export (SKU + optional GTIN) into
ReferenceRow objects. Quoted fields may contain commas and doubled
quotes (a field written as "12"" tile" reads as 12" tile). Every value
is read as text so leading zeros survive; values are trimmed.
"""

from io import StringIO
from typing import Optional, Union
import structlog

import pandas as pd

from exceptions import ReferenceCSVParseError, ReferenceCSVMissingColumnsError
from models.reference import ReferenceParseResult, ReferenceRow
from utils.text_utils import normalize_header, normalize_key

logger = structlog.get_logger(__name__)


# ===================
# COLUMN MAPPINGS
# ===================

# Normalized header aliases, in priority order
KEY_COLUMNS = ["sku", "variant sku", "item sku"]
SECONDARY_COLUMNS = ["gtin", "barcode", "variant barcode", "upc", "ean"]
PRODUCT_COLUMNS = ["product", "product name", "title", "name"]
# First non-empty wins, so "Real Qty." beats "Est. Qty."
QUANTITY_COLUMNS = ["real qty.", "est. qty.", "qty", "quantity"]

ENCODINGS = ["utf-8-sig", "latin-1"]


def _decode(content: Union[str, bytes]) -> str:
    """Decode uploaded bytes, trying UTF-8 (with BOM) before latin-1."""
    if isinstance(content, str):
        return content.lstrip("\ufeff")

    last_error: Optional[Exception] = None
    for enc in ENCODINGS:
        try:
            return content.decode(enc)
        except UnicodeDecodeError as e:
            last_error = e
    raise ReferenceCSVParseError(
        "Could not decode file; save it as UTF-8 CSV",
        details={"original_error": str(last_error)}
    )


def _read_frame(text: str, header: Optional[int], skip_blank_lines: bool = True) -> pd.DataFrame:
    return pd.read_csv(
        StringIO(text),
        header=header,
        index_col=False,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
        skip_blank_lines=skip_blank_lines,
    )


def _strip_leading_blank_lines(text: str) -> tuple[str, int]:
    """Drop blank lines above the header; return the text and how many were dropped."""
    lines = text.splitlines(keepends=True)
    dropped = 0
    while dropped < len(lines) and not lines[dropped].strip():
        dropped += 1
    return "".join(lines[dropped:]), dropped


def _find_column(headers: dict[str, str], aliases: list[str]) -> Optional[str]:
    """Return the original header whose normalized form matches the first alias found."""
    for alias in aliases:
        if alias in headers:
            return headers[alias]
    return None


def split_csv_line(line: str) -> list[str]:
    """
    Split one CSV line into trimmed fields.

    - '"A, B",C'        -> ['A, B', 'C']
    - '"12"" tile",x'   -> ['12" tile', 'x']

    Raises:
        ReferenceCSVParseError: If the line is malformed (e.g. unclosed quote)
    """
    if not line.strip():
        return [""]

    try:
        df = _read_frame(line, header=None)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ReferenceCSVParseError(
            f"Malformed CSV line: {e}",
            details={"line": line[:200]}
        ) from e

    if df.empty:
        return [""]
    return [str(v).strip() for v in df.iloc[0].tolist()]


# ===================
# MAIN PARSER
# ===================

def parse_reference_csv(
    content: Union[str, bytes],
    filename: Optional[str] = None,
) -> ReferenceParseResult:
    """
    Parse an uploaded reference CSV.

    Rows without a SKU are skipped and counted. Blank lines are ignored
    but still count, so row_number is the line number in the file.
    Missing trailing fields read as empty.

    Args:
        content: File content (bytes from an upload, or text)
        filename: Original filename, for logging

    Returns:
        ReferenceParseResult with rows in file order

    Raises:
        ReferenceCSVParseError: If the file is empty or malformed
        ReferenceCSVMissingColumnsError: If no SKU column is present
    """
    logger.info("parsing_reference_csv", filename=filename)

    text = _decode(content)
    if not text.strip():
        raise ReferenceCSVParseError("CSV file is empty")

    # Blank lines stay in the frame so row numbers match file lines
    text, leading_blank = _strip_leading_blank_lines(text)
    try:
        df = _read_frame(text, header=0, skip_blank_lines=False)
    except pd.errors.EmptyDataError as e:
        raise ReferenceCSVParseError("CSV file is empty") from e
    except pd.errors.ParserError as e:
        logger.error("reference_csv_malformed", filename=filename, error=str(e))
        raise ReferenceCSVParseError(
            f"Error parsing CSV file. Please check the file format: {e}",
            details={"original_error": str(e)}
        ) from e

    original_headers = [str(c).strip() for c in df.columns]
    df.columns = original_headers
    headers = {}
    for col in original_headers:
        headers.setdefault(normalize_header(col), col)

    key_col = _find_column(headers, KEY_COLUMNS)
    if key_col is None:
        raise ReferenceCSVMissingColumnsError(missing=["SKU"], found=original_headers)

    secondary_col = _find_column(headers, SECONDARY_COLUMNS)
    product_col = _find_column(headers, PRODUCT_COLUMNS)
    quantity_cols = [headers[a] for a in QUANTITY_COLUMNS if a in headers]

    rows: list[ReferenceRow] = []
    skipped = 0

    for idx, record in enumerate(df.to_dict(orient="records")):
        values = {col: "" if pd.isna(val) else str(val).strip() for col, val in record.items()}
        if not any(values.values()):
            continue

        key = normalize_key(values.get(key_col))
        if key is None:
            skipped += 1
            continue

        quantity = next((values[c] for c in quantity_cols if values.get(c)), None)

        rows.append(ReferenceRow(
            row_number=idx + leading_blank + 2,  # header is row 1
            key=key,
            secondary_key=normalize_key(values.get(secondary_col)) if secondary_col else None,
            product=normalize_key(values.get(product_col)) if product_col else None,
            quantity=quantity,
            raw=values,
        ))

    logger.info(
        "reference_csv_parsed",
        filename=filename,
        rows=len(rows),
        skipped=skipped,
        key_column=key_col,
        secondary_column=secondary_col,
    )

    return ReferenceParseResult(
        rows=rows,
        headers=original_headers,
        key_column=key_col,
        secondary_column=secondary_col,
        product_column=product_col,
        quantity_column=quantity_cols[0] if quantity_cols else None,
        skipped_rows=skipped,
    )
