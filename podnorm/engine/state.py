"""
Parser state for one feed document.

The state is a tree of optional scopes rather than a bag of flags: a
sub-entity accumulator (owner, funding, value, person, ...) only exists as
an attribute of the channel or item scope that owns it, so it cannot be
open while its owner is closed. Opening a scope builds a fresh accumulator,
closing it sets the attribute back to None.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .hashing import ContentHasher
from .value_block import ValueBlock, ValueSelection


# ============================================================================
# Sub-entity accumulators
# ============================================================================


@dataclass
class OwnerScope:
    name: str = ""
    email: str = ""


@dataclass
class FundingScope:
    url: str = ""
    text: str = ""


@dataclass
class ImageScope:
    url: str = ""


@dataclass
class PersonScope:
    role: str = ""
    group: str = ""
    img: str = ""
    href: str = ""


@dataclass
class SoundbiteScope:
    start_time: str = ""
    duration: str = ""


@dataclass
class LinkedFileScope:
    """Transcript or chapters reference: a URL plus its MIME type."""
    url: str = ""
    mime_type: str = ""


# ============================================================================
# Channel and item scopes
# ============================================================================


@dataclass
class ChannelState:
    title: str = ""
    link: str = ""
    description: str = ""
    itunes_summary: str = ""
    language: str = ""
    generator: str = ""
    itunes_author: str = ""
    itunes_type: str = ""
    itunes_new_feed_url: str = ""
    explicit: str = ""
    image_url: str = ""
    itunes_image: str = ""
    podcast_guid: str = ""
    owner_name: str = ""
    owner_email: str = ""
    locked: int = 0
    locked_owner: str = ""
    funding_url: str = ""
    funding_text: str = ""
    hub_url: str = ""
    self_url: str = ""
    pub_date: str = ""
    last_build_date: str = ""
    categories: List[str] = field(default_factory=list)
    value: ValueSelection = field(default_factory=ValueSelection)

    # open sub-entity scopes
    owner: Optional[OwnerScope] = None
    locked_open: bool = False
    funding: Optional[FundingScope] = None
    category_open: bool = False
    image: Optional[ImageScope] = None
    value_block: Optional[ValueBlock] = None


@dataclass
class ItemState:
    title: str = ""
    itunes_title: str = ""
    link: str = ""
    description: str = ""
    content: str = ""
    content_encoded: str = ""
    itunes_summary: str = ""
    pub_date: str = ""
    published: str = ""
    updated: str = ""
    guid: str = ""
    itunes_duration: str = ""
    itunes_episode: str = ""
    itunes_season: str = ""
    itunes_episode_type: str = ""
    itunes_explicit: str = ""
    itunes_image: str = ""
    image: str = ""
    enclosure_url: str = ""
    enclosure_length: str = ""
    enclosure_type: str = ""
    has_valid_enclosure: bool = False
    funding_url: str = ""
    funding_text: str = ""
    value: ValueSelection = field(default_factory=ValueSelection)

    # open sub-entity scopes
    funding: Optional[FundingScope] = None
    image_scope: Optional[ImageScope] = None
    value_block: Optional[ValueBlock] = None
    person: Optional[PersonScope] = None
    soundbite: Optional[SoundbiteScope] = None
    transcript: Optional[LinkedFileScope] = None
    chapters: Optional[LinkedFileScope] = None
    alternate_enclosure_depth: int = 0

    @property
    def in_alternate_enclosure(self) -> bool:
        return self.alternate_enclosure_depth > 0


@dataclass
class ChannelMetrics:
    """Per-channel aggregates that survive from one item to the next."""
    item_count: int = 0
    pubdates: List[int] = field(default_factory=list)
    newest_pubdate: int = 0
    oldest_pubdate: int = 0
    item_hash: ContentHasher = field(default_factory=ContentHasher)

    def record_pubdate(self, pubdate: int) -> None:
        """Track newest/oldest; on a tie the earlier item keeps its place."""
        self.pubdates.append(pubdate)
        if self.item_count == 0 or pubdate > self.newest_pubdate:
            self.newest_pubdate = pubdate
        if self.item_count == 0 or pubdate < self.oldest_pubdate:
            self.oldest_pubdate = pubdate

    def next_item_ordinal(self) -> int:
        return self.item_count + 1


@dataclass
class ElementFrame:
    """One open XML element and the text collected directly inside it."""
    key: str
    parts: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.parts)


@dataclass
class ParserState:
    """Everything the normalizer knows about the document it is reading."""
    feed_id: Optional[int] = None
    now: int = 0
    channel: Optional[ChannelState] = None
    item: Optional[ItemState] = None
    metrics: ChannelMetrics = field(default_factory=ChannelMetrics)
    elements: List[ElementFrame] = field(default_factory=list)
    ignored_depth: int = 0
    channels_seen: int = 0
    items_emitted: int = 0
    items_discarded: int = 0

    def enter_channel(self) -> ChannelState:
        self.channel = ChannelState()
        self.item = None
        self.metrics = ChannelMetrics()
        self.channels_seen += 1
        return self.channel

    def enter_item(self) -> ItemState:
        self.item = ItemState()
        return self.item

    def item_id(self) -> str:
        """Foreign key of the item being read: ``{feed_id}_{ordinal}``."""
        return f"{self.feed_id or 0}_{self.metrics.next_item_ordinal()}"
