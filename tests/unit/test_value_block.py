"""
Unit Tests for Value Blocks
===========================

Canonical JSON, recipient caps and the per-scope selection rule.
"""

import json

import pytest

from podnorm.engine.value_block import (
    MAX_RECIPIENTS,
    ValueBlock,
    ValueRecipient,
    ValueSelection,
    canonical_json,
    parse_fee,
    parse_split,
    value_type_code,
)


def make_block(model_type="lightning", recipients=1):
    block = ValueBlock(model_type=model_type, method="keysend", suggested="0.00000005000")
    for n in range(recipients):
        block.add_recipient(ValueRecipient(name=f"r{n}", recipient_type="node", address=f"addr{n}", split=1))
    return block


class TestValueParsing:
    """Attribute parsing helpers."""

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("YES", True), ("1", True),
        ("false", False), ("", False), (None, False), ("no", False),
    ])
    def test_parse_fee(self, raw, expected):
        assert parse_fee(raw) is expected

    @pytest.mark.parametrize("raw,expected", [
        ("90", 90), (" 5 ", 5), ("2.7", 2), ("lots", 0), (None, 0),
    ])
    def test_parse_split(self, raw, expected):
        assert parse_split(raw) == expected

    def test_type_codes(self):
        assert value_type_code("lightning") == 0
        assert value_type_code("HBD") == 1
        assert value_type_code("bitcoin") == 2
        assert value_type_code("monero") == 0
        assert value_type_code(None) == 0


class TestCanonicalJson:
    """Byte-stable serialization."""

    def test_attribute_order_does_not_matter(self):
        a = ValueBlock.from_attributes({"type": "lightning", "method": "keysend", "suggested": "1"})
        b = ValueBlock.from_attributes({"suggested": "1", "method": "keysend", "type": "lightning"})
        recipient_attrs = {"name": "Host", "type": "node", "address": "abc", "split": "95"}
        a.add_recipient(ValueRecipient.from_attributes(recipient_attrs))
        b.add_recipient(ValueRecipient.from_attributes(dict(reversed(list(recipient_attrs.items())))))
        assert a.to_json() == b.to_json()

    def test_keys_sorted_and_compact(self):
        block = make_block()
        text = block.to_json()
        assert text.startswith('{"destinations":[{"address":"addr0","name":"r0","split":1,"type":"node"}]')
        assert '"model":{"method":"keysend","suggested":"0.00000005000","type":"lightning"}' in text
        assert " " not in text

    def test_fee_only_serialized_when_true(self):
        with_fee = ValueRecipient.from_attributes({"name": "App", "fee": "yes"}).to_dict()
        without_fee = ValueRecipient.from_attributes({"name": "App", "fee": "false"}).to_dict()
        assert with_fee["fee"] is True
        assert "fee" not in without_fee

    def test_custom_fields_only_when_present(self):
        recipient = ValueRecipient.from_attributes(
            {"name": "Host", "customKey": "696969", "customValue": "abc"}
        ).to_dict()
        assert recipient["customKey"] == "696969"
        assert recipient["customValue"] == "abc"
        assert "customKey" not in ValueRecipient(name="x").to_dict()

    def test_suggested_omitted_when_empty(self):
        block = ValueBlock(model_type="lightning", method="keysend")
        assert "suggested" not in block.to_document()["model"]

    def test_arrays_keep_order(self):
        assert canonical_json({"b": [3, 1, 2], "a": 1}) == '{"a":1,"b":[3,1,2]}'


class TestRecipientCap:
    """First hundred recipients win."""

    def test_cap(self):
        block = make_block(recipients=150)
        assert len(block.recipients) == MAX_RECIPIENTS
        assert block.recipients[-1].name == "r99"
        assert len(json.loads(block.to_json())["destinations"]) == 100

    def test_add_recipient_reports_full(self):
        block = make_block(recipients=100)
        assert block.add_recipient(ValueRecipient(name="late")) is False


class TestValueSelection:
    """Choosing one block per scope."""

    def test_empty_block_ignored(self):
        selection = ValueSelection()
        assert selection.offer(make_block(recipients=0)) is False
        assert selection.pending is None

    def test_last_non_lightning_wins(self):
        selection = ValueSelection()
        first, second = make_block("hbd"), make_block("bitcoin")
        selection.offer(first)
        selection.offer(second)
        assert selection.pending is second

    def test_lightning_blocks_later_non_lightning(self):
        selection = ValueSelection()
        lightning = make_block("lightning")
        selection.offer(lightning)
        assert selection.offer(make_block("hbd")) is False
        assert selection.pending is lightning

    def test_lightning_replaces_earlier_non_lightning(self):
        selection = ValueSelection()
        selection.offer(make_block("hbd"))
        lightning = make_block("lightning")
        selection.offer(lightning)
        assert selection.pending is lightning
        assert selection.has_lightning
