"""
Value-for-value block normalization.

A ``<podcast:value>`` element becomes one canonical JSON document:

    {"destinations": [...], "model": {"method": ..., "suggested": ..., "type": ...}}

Keys are sorted at every level and separators are compact, so two blocks
with the same content always serialize to the same bytes no matter how the
attributes were ordered in the source.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

MAX_RECIPIENTS = 100

VALUE_TYPE_CODES: Dict[str, int] = {
    "lightning": 0,
    "hbd": 1,
    "bitcoin": 2,
}
DEFAULT_VALUE_TYPE_CODE = 0

_TRUE_FLAGS = {"true", "yes", "1"}


def value_type_code(value_type: Optional[str]) -> int:
    """Numeric code of a value type; unknown types fall back to the default."""
    return VALUE_TYPE_CODES.get((value_type or "").strip().lower(), DEFAULT_VALUE_TYPE_CODE)


def parse_fee(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in _TRUE_FLAGS


def parse_split(raw: Optional[str]) -> int:
    text = (raw or "").strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return 0


def canonical_json(document: Any) -> str:
    """Serialize with sorted keys and no insignificant whitespace."""
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass
class ValueRecipient:
    name: str = ""
    recipient_type: str = ""
    address: str = ""
    split: int = 0
    fee: bool = False
    custom_key: str = ""
    custom_value: str = ""

    @classmethod
    def from_attributes(cls, attributes: Dict[str, str]) -> "ValueRecipient":
        return cls(
            name=attributes.get("name", "").strip(),
            recipient_type=attributes.get("type", "").strip(),
            address=attributes.get("address", "").strip(),
            split=parse_split(attributes.get("split")),
            fee=parse_fee(attributes.get("fee")),
            custom_key=attributes.get("customKey", "").strip(),
            custom_value=attributes.get("customValue", "").strip(),
        )

    def to_dict(self) -> Dict[str, Any]:
        destination: Dict[str, Any] = {
            "name": self.name,
            "type": self.recipient_type,
            "address": self.address,
            "split": self.split,
        }
        # An unset fee is left out rather than written as false
        if self.fee:
            destination["fee"] = True
        if self.custom_key:
            destination["customKey"] = self.custom_key
        if self.custom_value:
            destination["customValue"] = self.custom_value
        return destination


@dataclass
class ValueBlock:
    """Model of one ``<podcast:value>`` element plus its recipients."""
    model_type: str = ""
    method: str = ""
    suggested: str = ""
    recipients: List[ValueRecipient] = field(default_factory=list)

    @classmethod
    def from_attributes(cls, attributes: Dict[str, str]) -> "ValueBlock":
        return cls(
            model_type=attributes.get("type", "").strip(),
            method=attributes.get("method", "").strip(),
            suggested=attributes.get("suggested", "").strip(),
        )

    def add_recipient(self, recipient: ValueRecipient) -> bool:
        """Keep the first hundred recipients; returns False once the list is full."""
        if len(self.recipients) >= MAX_RECIPIENTS:
            return False
        self.recipients.append(recipient)
        return True

    @property
    def type_code(self) -> int:
        return value_type_code(self.model_type)

    @property
    def is_lightning(self) -> bool:
        return self.model_type.strip().lower() == "lightning"

    def to_document(self) -> Dict[str, Any]:
        model: Dict[str, Any] = {"type": self.model_type, "method": self.method}
        if self.suggested:
            model["suggested"] = self.suggested
        return {
            "model": model,
            "destinations": [r.to_dict() for r in self.recipients[:MAX_RECIPIENTS]],
        }

    def to_json(self) -> str:
        return canonical_json(self.to_document())


@dataclass
class ValueSelection:
    """Chooses which of several value blocks in one scope gets emitted.

    A new block replaces the pending one, except that once a lightning block
    has been accepted, blocks of any other type are ignored.
    """
    pending: Optional[ValueBlock] = None
    has_lightning: bool = False

    def offer(self, block: ValueBlock) -> bool:
        if not block.recipients:
            return False
        if self.has_lightning and not block.is_lightning:
            return False
        self.pending = block
        if block.is_lightning:
            self.has_lightning = True
        return True
