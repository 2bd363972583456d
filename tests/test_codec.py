"""Tests for the share-link codec."""

import base64
import json
from urllib.parse import quote

import pytest

from src.models.budget import AnnualBudget, BudgetEntry
from src.sharing.codec import (
    ShareLinkError,
    _b64decode,
    build_share_url,
    compact_months,
    decode_legacy_token,
    decode_share,
    decode_token,
    encode_budget,
    encode_legacy_budget,
    parse_share_link,
    split_fragment,
)


def _token(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def _fields(entry: BudgetEntry) -> tuple:
    return entry.category, entry.description, entry.amount, entry.paid


class TestCompactEncoding:
    """Tests for the positional-array form."""

    def test_empty_months_are_omitted(self, sample_budget, year):
        months = compact_months(sample_budget, year)
        assert [m[0] for m in months] == [0, 2]

    def test_known_categories_become_indices(self, sample_budget, year):
        january = compact_months(sample_budget, year)[0]
        assert january[1] == [[0, "Paycheck", 1000, 1, "inc-1"]]
        assert january[2][0] == [0, "Rent", 300, 0, "exp-1"]
        assert january[2][1] == [1, "Groceries", 200, 1, "exp-2"]

    def test_custom_category_stays_literal(self, sample_budget, year):
        march = compact_months(sample_budget, year)[1]
        assert march[2] == [["Pets", "Vet visit", 85.5, 0, "exp-3"]]

    def test_missing_year_encodes_nothing(self, sample_budget):
        assert compact_months(sample_budget, 1999) == []

    def test_token_is_base64_of_utf8_json(self, year):
        budget = AnnualBudget.empty(year)
        budget.month(year, 1).expenses.append(
            BudgetEntry(id="x", category="Food", description="Pão de açúcar", amount=7)
        )
        raw = base64.b64decode(encode_budget(budget, year)).decode("utf-8")
        assert json.loads(raw) == [[1, [], [[1, "Pão de açúcar", 7, 0, "x"]]]]


class TestRoundTrip:
    """decode(encode(budget)) keeps every entry of the non-empty months."""

    def test_round_trip(self, sample_budget, year):
        decoded = decode_token(encode_budget(sample_budget, year), year)
        for month in sample_budget.year(year):
            restored = decoded.month(year, month.month)
            assert [_fields(e) for e in restored.income] == [_fields(e) for e in month.income]
            assert [_fields(e) for e in restored.expenses] == [_fields(e) for e in month.expenses]
            assert [e.id for e in restored.expenses] == [e.id for e in month.expenses]

    def test_decoded_budget_has_full_skeleton(self, sample_budget, year):
        decoded = decode_token(encode_budget(sample_budget, year), year)
        assert len(decoded.year(year)) == 12
        assert decoded.month(year, 5).is_empty


class TestDecoding:
    """Tests for decoding edge cases."""

    def test_out_of_range_index_is_literal(self, year):
        token = _token([[0, [], [[42, "Odd", 5, 0, "id-1"]]]])
        entry = decode_token(token, year).month(year, 0).expenses[0]
        assert entry.category == "42"

    def test_missing_id_is_synthesized(self, year):
        token = _token([[0, [["Salary", "Pay", 10, 1]], []]])
        entry = decode_token(token, year).month(year, 0).income[0]
        assert entry.id
        assert entry.paid is True

    def test_missing_padding_is_tolerated(self, sample_budget, year):
        token = encode_budget(sample_budget, year).rstrip("=")
        assert decode_token(token, year).month(year, 0).income[0].id == "inc-1"

    def test_plus_turned_into_space_is_repaired(self):
        # "A++/" is the base64 form of these three bytes
        assert _b64decode("A  /") == b"\x03\xef\xbf"

    @pytest.mark.parametrize("number", ["1e999", "-1e999", "1" + "0" * 400])
    def test_non_finite_amount_is_rejected(self, number, year):
        """Amounts that overflow a float never reach the budget."""
        text = '[[0,[],[[0,"x",' + number + ',0,"a"]]]]'
        token = base64.b64encode(text.encode()).decode()
        with pytest.raises(ShareLinkError, match="finite"):
            decode_token(token, year)

    @pytest.mark.parametrize("token", [
        "not base64!!",
        base64.b64encode(b"{not json").decode(),
        _token({"months": []}),
        _token([[0, [["Salary", "Pay", 10]], []]]),
        _token([[12, [], []]]),
        _token([[0, []]]),
        _token([[0, [["Food", "x", -5, 0, "a"]], []]]),
        _token([[0, [["Food", "x", "ten", 0, "a"]], []]]),
        base64.b64encode(b"\xff\xfe").decode(),
    ])
    def test_malformed_tokens_raise(self, token, year):
        with pytest.raises(ShareLinkError):
            decode_token(token, year)


class TestLegacyLinks:
    """Tests for `#data=` links carrying the whole budget."""

    def test_legacy_round_trip(self, sample_budget, year):
        decoded = decode_legacy_token(encode_legacy_budget(sample_budget), year)
        assert decoded == sample_budget

    def test_browser_style_legacy_token(self, year):
        """btoa(encodeURIComponent(JSON.stringify(budget))) from the browser."""
        months = [{"month": i, "income": [], "expenses": []} for i in range(12)]
        months[0]["expenses"] = [
            {"id": "b1", "category": "Alimentação", "description": "Feira", "amount": 80}
        ]
        text = quote(json.dumps({str(year): months}), safe="-_.!~*'()")
        token = base64.b64encode(text.encode("ascii")).decode("ascii")

        entry = decode_legacy_token(token, year).month(year, 0).expenses[0]
        assert entry.category == "Food"
        assert entry.description == "Feira"
        assert entry.paid is False

    def test_legacy_without_year_is_rejected(self, sample_budget):
        with pytest.raises(ShareLinkError, match="no data for 1999"):
            decode_legacy_token(encode_legacy_budget(sample_budget), 1999)


class TestFragments:
    """Tests for share URLs and fragment parsing."""

    def test_build_share_url(self):
        url = build_share_url("https://example.org/app/?x=1#old", "abc=")
        assert url == "https://example.org/app/?x=1#v2=abc="

    @pytest.mark.parametrize("text, expected", [
        ("https://example.org/#v2=abc=", ("v2", "abc=")),
        ("#data=xyz", ("data", "xyz")),
        ("v2=abc", ("v2", "abc")),
        ("https://example.org/", None),
        ("#other=1", None),
        ("#v2=", None),
        ("", None),
    ])
    def test_split_fragment(self, text, expected):
        assert split_fragment(text) == expected

    def test_parse_share_link(self, sample_budget, year):
        url = build_share_url("https://example.org/", encode_budget(sample_budget, year))
        decoded = parse_share_link(url, year)
        assert decoded.version == "v2"
        assert decoded.entry_count == 4

    def test_parse_without_fragment(self, year):
        assert parse_share_link("https://example.org/", year) is None

    def test_unknown_version(self, year):
        with pytest.raises(ShareLinkError):
            decode_share("v9", "abc", year)
