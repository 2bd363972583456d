"""
Share-Link Codec

Packs the non-empty months of one year into a URL fragment so a budget
can be handed over as a plain link, and unpacks such links on load.

WIRE FORMAT (fragment `#v2=<token>`):
    token    = base64( utf-8( json(months) ) )
    months   = [[month_index, income_rows, expense_rows], ...]
    row      = [category, description, amount, paid, id]
    category = index into the canonical category list of the row's
               entry type, or the literal name for custom categories
    paid     = 0 or 1

Months without entries are omitted. The id is optional on input; rows
without one get a fresh id (see src.budget.merge for the consequence).

LEGACY FORMAT (fragment `#data=<token>`):
    token = base64( encodeURIComponent( json(AnnualBudget) ) )

Any decoding failure raises ShareLinkError. A half-decoded link is never
returned.
"""

import base64
import binascii
import json
import math
from typing import Any, Optional, Union
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from pydantic import BaseModel, ValidationError

from src.models.budget import (
    AnnualBudget,
    BudgetEntry,
    EntryType,
    MonthlyData,
    canonicalize_categories,
)


SHARE_VERSION = "v2"
LEGACY_VERSION = "data"

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


class ShareLinkError(ValueError):
    """A share link could not be decoded."""
    pass


class DecodedShareLink(BaseModel):
    """A successfully decoded share link."""

    version: str
    year: int
    budget: AnnualBudget

    @property
    def entry_count(self) -> int:
        return sum(
            len(m.income) + len(m.expenses)
            for m in self.budget.year(self.year)
        )


# =============================================================================
# ENCODING
# =============================================================================

def _category_ref(category: str, entry_type: EntryType) -> Union[int, str]:
    categories = entry_type.categories
    if category in categories:
        return categories.index(category)
    return category


def _number(amount: float) -> Union[int, float]:
    # 1000 rather than 1000.0 keeps the token as short as the browser's
    return int(amount) if float(amount).is_integer() else amount


def _encode_row(entry: BudgetEntry, entry_type: EntryType) -> list:
    return [
        _category_ref(entry.category, entry_type),
        entry.description,
        _number(entry.amount),
        1 if entry.paid else 0,
        entry.id,
    ]


def compact_months(budget: AnnualBudget, year: int) -> list[list]:
    """Positional-array form of the non-empty months of a year."""
    if year not in budget:
        return []
    return [
        [
            month.month,
            [_encode_row(e, EntryType.INCOME) for e in month.income],
            [_encode_row(e, EntryType.EXPENSES) for e in month.expenses],
        ]
        for month in budget.year(year)
        if not month.is_empty
    ]


def encode_budget(budget: AnnualBudget, year: int) -> str:
    """Encode the non-empty months of `year` as a v2 token."""
    text = json.dumps(
        compact_months(budget, year),
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def build_share_url(base_url: str, token: str, version: str = SHARE_VERSION) -> str:
    """Append the token as `#<version>=<token>`, dropping any old fragment."""
    parts = urlsplit(base_url)
    return urlunsplit(parts._replace(fragment=f"{version}={token}"))


# =============================================================================
# DECODING
# =============================================================================

def _b64decode(token: str) -> bytes:
    # '+' turns into ' ' when a token travels through a query string
    cleaned = token.strip().replace(" ", "+")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ShareLinkError(f"Malformed base64 payload: {e}") from e


def _resolve_category(ref: Any, entry_type: EntryType) -> str:
    categories = entry_type.categories
    if isinstance(ref, int) and not isinstance(ref, bool) and 0 <= ref < len(categories):
        return categories[ref]
    if ref is None or isinstance(ref, (list, dict)):
        raise ShareLinkError(f"Invalid category reference: {ref!r}")
    return str(ref)


def _decode_row(row: Any, entry_type: EntryType) -> BudgetEntry:
    if not isinstance(row, list) or len(row) < 4:
        raise ShareLinkError(f"Malformed entry row: {row!r}")
    category, description, amount, paid = row[:4]
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ShareLinkError(f"Invalid amount: {amount!r}")
    # 1e999 parses to inf, which storage would write back as null
    try:
        finite = math.isfinite(amount)
    except OverflowError:
        finite = False
    if not finite:
        raise ShareLinkError("Amount is not a finite number")
    entry_id = row[4] if len(row) > 4 and row[4] else None
    fields = {
        "category": _resolve_category(category, entry_type),
        "description": "" if description is None else str(description),
        "amount": amount,
        "paid": paid == 1,
    }
    if entry_id is not None:
        fields["id"] = str(entry_id)
    return BudgetEntry(**fields)


def _decode_month(item: Any) -> MonthlyData:
    if not isinstance(item, list) or len(item) < 3:
        raise ShareLinkError(f"Malformed month tuple: {item!r}")
    index, income_rows, expense_rows = item[:3]
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 11:
        raise ShareLinkError(f"Invalid month index: {index!r}")
    if not isinstance(income_rows, list) or not isinstance(expense_rows, list):
        raise ShareLinkError("Month tuple does not hold two entry lists")
    return MonthlyData(
        month=index,
        income=[_decode_row(r, EntryType.INCOME) for r in income_rows],
        expenses=[_decode_row(r, EntryType.EXPENSES) for r in expense_rows],
    )


def decode_token(token: str, year: int) -> AnnualBudget:
    """
    Decode a v2 token into a full budget for `year`.

    Months missing from the token come back as empty slots.
    """
    raw = _b64decode(token)
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ShareLinkError(f"Malformed share payload: {e}") from e
    if not isinstance(payload, list):
        raise ShareLinkError("Share payload is not a list of months")

    try:
        budget = AnnualBudget.empty(year)
        for item in payload:
            month = _decode_month(item)
            slot = budget.month(year, month.month)
            slot.income.extend(month.income)
            slot.expenses.extend(month.expenses)
    except ValidationError as e:
        raise ShareLinkError(f"Invalid entry in share payload: {e}") from e
    return budget


def decode_legacy_token(token: str, year: int) -> AnnualBudget:
    """Decode a `#data=` token carrying the full budget JSON."""
    raw = _b64decode(token)
    try:
        text = unquote(raw.decode("ascii"), errors="strict")
        budget = AnnualBudget.model_validate_json(text)
    except (UnicodeDecodeError, ValueError) as e:
        # pydantic's ValidationError is a ValueError
        raise ShareLinkError(f"Malformed legacy share payload: {e}") from e
    if year not in budget:
        raise ShareLinkError(f"Legacy share payload has no data for {year}")
    return canonicalize_categories(budget)


def encode_legacy_budget(budget: AnnualBudget) -> str:
    """Legacy `#data=` token, kept for links shared with older versions."""
    text = quote(budget.model_dump_json(), safe=_URI_COMPONENT_SAFE)
    return base64.b64encode(text.encode("ascii")).decode("ascii")


def split_fragment(text: str) -> Optional[tuple[str, str]]:
    """
    Extract (version, token) from a URL, a `#...` fragment or a bare
    `v2=...` string. Returns None when no share fragment is present.
    """
    if not text:
        return None
    text = text.strip()
    fragment = text.split("#", 1)[1] if "#" in text else text
    if "=" not in fragment:
        return None
    version, token = fragment.split("=", 1)
    if version not in (SHARE_VERSION, LEGACY_VERSION) or not token:
        return None
    return version, token


def decode_share(version: str, token: str, year: int) -> DecodedShareLink:
    """Decode a token of a known version."""
    if version == SHARE_VERSION:
        budget = decode_token(token, year)
    elif version == LEGACY_VERSION:
        budget = decode_legacy_token(token, year)
    else:
        raise ShareLinkError(f"Unknown share link version: {version}")
    return DecodedShareLink(version=version, year=year, budget=budget)


def parse_share_link(text: str, year: int) -> Optional[DecodedShareLink]:
    """
    Decode whatever share fragment `text` carries.

    Returns None when there is no share fragment; raises ShareLinkError
    when there is one but it cannot be decoded.
    """
    parts = split_fragment(text)
    if parts is None:
        return None
    version, token = parts
    return decode_share(version, token, year)
