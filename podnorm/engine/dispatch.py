"""
Dispatch table.

Each element is resolved once to its canonical tag key, then routed to the
start and end handlers registered for that key. Text is collected on the
open element's frame and handed to end handlers as a whole, so character
data split across several parser callbacks (or CDATA sections) behaves
exactly like one contiguous string.

Handlers are not exclusive: contextual handlers run for every end event and
decide from the open scopes whether the element concerns them (``name`` and
``email`` only mean something inside ``itunes:owner``).
"""

from collections import defaultdict
from typing import Callable, Dict, List

from . import builders, resolvers
from .events import EndElement, StartElement
from .hashing import item_hash_fields
from .namespaces import canonical_tag
from .state import (
    ElementFrame,
    FundingScope,
    ImageScope,
    LinkedFileScope,
    OwnerScope,
    ParserState,
    PersonScope,
    SoundbiteScope,
)
from .value_block import ValueBlock, ValueRecipient
from ..utils.logging import get_logger_for_component
from ..utils.sanitizers import is_http_url

StartHandler = Callable[[ParserState, object, Dict[str, str]], None]
EndHandler = Callable[[ParserState, object, str], None]
ContextualHandler = Callable[[ParserState, object, str, str], None]

# Subtrees whose content must not leak into the enclosing channel
IGNORED_SUBTREES = frozenset({"podcast:liveItem", "textInput", "textinput"})

logger = get_logger_for_component("dispatch")


class DispatchTable:
    """Lookup from canonical tag key to start/end handlers."""

    def __init__(self):
        self._start: Dict[str, List[StartHandler]] = defaultdict(list)
        self._end: Dict[str, List[EndHandler]] = defaultdict(list)
        self._contextual: List[ContextualHandler] = []

    def on_start(self, *keys: str):
        def register(handler: StartHandler) -> StartHandler:
            for key in keys:
                self._start[key].append(handler)
            return handler
        return register

    def on_end(self, *keys: str):
        def register(handler: EndHandler) -> EndHandler:
            for key in keys:
                self._end[key].append(handler)
            return handler
        return register

    def contextual(self, handler: ContextualHandler) -> ContextualHandler:
        self._contextual.append(handler)
        return handler

    def keys(self) -> List[str]:
        return sorted(set(self._start) | set(self._end))

    # ------------------------------------------------------------------
    # event entry points
    # ------------------------------------------------------------------

    def handle_start(self, state: ParserState, out, event: StartElement) -> str:
        key = canonical_tag(event.namespace, event.local_name)
        state.elements.append(ElementFrame(key))

        if state.ignored_depth or key in IGNORED_SUBTREES:
            state.ignored_depth += 1
            return key

        for handler in self._start.get(key, ()):
            handler(state, out, event.attributes)
        return key

    def handle_text(self, state: ParserState, text: str) -> None:
        if state.elements and not state.ignored_depth:
            state.elements[-1].parts.append(text)

    def handle_end(self, state: ParserState, out, event: EndElement) -> str:
        key = canonical_tag(event.namespace, event.local_name)
        frame = state.elements.pop() if state.elements else ElementFrame(key)

        if state.ignored_depth:
            state.ignored_depth -= 1
            return key

        text = frame.text
        for contextual in self._contextual:
            contextual(state, out, key, text)
        for handler in self._end.get(key, ()):
            handler(state, out, text)
        return key


DEFAULT_DISPATCH = DispatchTable()
on_start = DEFAULT_DISPATCH.on_start
on_end = DEFAULT_DISPATCH.on_end
contextual = DEFAULT_DISPATCH.contextual


def _emit(out, record) -> None:
    if record is not None:
        out.emit(record)


def _channel_only(state: ParserState):
    """The channel, when no item is open and channel fields are writable."""
    channel = state.channel
    if channel is None or state.item is not None or channel.image is not None:
        return None
    return channel


def _keep_first(target, attribute: str, value: str) -> None:
    if value.strip() and not getattr(target, attribute).strip():
        setattr(target, attribute, value)


# ============================================================================
# Channel and item lifecycle
# ============================================================================


@on_start("channel", "atom:feed")
def start_channel(state: ParserState, out, attrs) -> None:
    state.enter_channel()


@on_start("item", "atom:entry")
def start_item(state: ParserState, out, attrs) -> None:
    state.enter_item()


@on_end("item", "atom:entry")
def end_item(state: ParserState, out, text: str) -> None:
    item = state.item
    if item is None:
        return
    state.item = None

    if not item.has_valid_enclosure:
        state.items_discarded += 1
        logger.debug(
            f"Discarded item without a usable enclosure: {item.title.strip()[:80]!r}"
        )
        return

    title = resolvers.resolve_item_title(item)
    guid = resolvers.resolve_item_guid(item)
    enclosure_type = resolvers.resolve_enclosure_type(item)
    pubdate = resolvers.parse_pub_date(resolvers.resolve_item_pub_date(item))

    # item_id() names this item until the ordinal advances below
    out.emit(builders.build_item(item, state, title, guid, enclosure_type, pubdate))
    if item.value.pending is not None:
        out.emit(builders.build_item_value(item.value.pending, state))

    metrics = state.metrics
    metrics.record_pubdate(pubdate)
    metrics.item_hash.fold(
        *item_hash_fields(
            title,
            item.link,
            item.enclosure_url,
            enclosure_type,
            item.funding_url,
            item.funding_text,
        )
    )
    metrics.item_count += 1
    state.items_emitted += 1


@on_end("channel", "atom:feed")
def end_channel(state: ParserState, out, text: str) -> None:
    channel = state.channel
    if channel is None:
        return

    feed_id = state.feed_id
    out.emit(builders.build_newsfeed(channel, state.metrics, feed_id, state.now))
    _emit(out, builders.build_channel_guid(channel, feed_id))
    _emit(out, builders.build_pubsub(channel, feed_id))
    _emit(out, builders.build_channel_funding(channel, feed_id))
    _emit(out, builders.build_categories(channel, feed_id))
    if channel.value.pending is not None:
        out.emit(builders.build_channel_value(channel.value.pending, feed_id, state.now))

    state.channel = None
    state.item = None


# ============================================================================
# Shared text fields
# ============================================================================


@on_end("title", "atom:title")
def end_title(state: ParserState, out, text: str) -> None:
    item = state.item
    if item is not None:
        if item.image_scope is None:
            _keep_first(item, "title", text)
        return
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "title", text)


@on_end("itunes:title")
def end_itunes_title(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "itunes_title", text)


@on_end("description", "summary", "atom:summary")
def end_description(state: ParserState, out, text: str) -> None:
    item = state.item
    if item is not None:
        if item.image_scope is None:
            _keep_first(item, "description", text)
        return
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "description", text)


@on_end("subtitle", "atom:subtitle")
def end_subtitle(state: ParserState, out, text: str) -> None:
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "description", text)


@on_end("itunes:summary")
def end_itunes_summary(state: ParserState, out, text: str) -> None:
    target = state.item if state.item is not None else _channel_only(state)
    if target is not None:
        _keep_first(target, "itunes_summary", text)


@on_end("content:encoded")
def end_content_encoded(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "content_encoded", text)


@on_end("content", "atom:content")
def end_content(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "content", text)


@on_end("itunes:explicit")
def end_explicit(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "itunes_explicit", text)
        return
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "explicit", text)


# ============================================================================
# Channel-only scalars (first non-empty value wins)
# ============================================================================


def _channel_scalar(key: str, attribute: str) -> None:
    def handler(state: ParserState, out, text: str) -> None:
        channel = _channel_only(state)
        if channel is not None:
            _keep_first(channel, attribute, text)

    handler.__name__ = f"end_channel_{attribute}"
    on_end(key)(handler)


for _key, _attribute in (
    ("language", "language"),
    ("generator", "generator"),
    ("atom:generator", "generator"),
    ("itunes:author", "itunes_author"),
    ("itunes:type", "itunes_type"),
    ("itunes:new-feed-url", "itunes_new_feed_url"),
    ("podcast:guid", "podcast_guid"),
    ("lastBuildDate", "last_build_date"),
):
    _channel_scalar(_key, _attribute)


@on_end("pubDate")
def end_pub_date(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "pub_date", text)
        return
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "pub_date", text)


@on_end("published", "atom:published")
def end_published(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "published", text)


@on_end("updated", "atom:updated")
def end_updated(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "updated", text)
        return
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "last_build_date", text)


# ============================================================================
# Links and enclosures
# ============================================================================


def _capture_enclosure(item, url: str, length: str, mime_type: str) -> None:
    """First enclosure with an http(s) URL wins; the rest are ignored.

    Enclosures nested in an alternate enclosure never become the primary one.
    """
    if item.has_valid_enclosure or item.in_alternate_enclosure or not is_http_url(url):
        return
    item.enclosure_url = url.strip()
    item.enclosure_length = (length or "").strip()
    item.enclosure_type = (mime_type or "").strip()
    item.has_valid_enclosure = True


@on_start("enclosure")
def start_enclosure(state: ParserState, out, attrs) -> None:
    if state.item is not None:
        _capture_enclosure(
            state.item, attrs.get("url", ""), attrs.get("length", ""), attrs.get("type", "")
        )


@on_start("link", "atom:link")
def start_link(state: ParserState, out, attrs) -> None:
    href = attrs.get("href", "").strip()
    if not href:
        return
    rel = attrs.get("rel", "").strip().lower() or "alternate"

    item = state.item
    if item is not None:
        if rel == "alternate":
            _keep_first(item, "link", href)
        elif rel == "enclosure":
            _capture_enclosure(item, href, attrs.get("length", ""), attrs.get("type", ""))
        return

    channel = _channel_only(state)
    if channel is None:
        return
    if rel == "alternate":
        _keep_first(channel, "link", href)
    elif rel == "hub":
        _keep_first(channel, "hub_url", href)
    elif rel == "self":
        _keep_first(channel, "self_url", href)


@on_end("link", "atom:link")
def end_link(state: ParserState, out, text: str) -> None:
    item = state.item
    if item is not None:
        if item.image_scope is None:
            _keep_first(item, "link", text)
        return
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "link", text)


@on_end("guid", "id", "atom:id")
def end_guid(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "guid", text)


# ============================================================================
# Images
# ============================================================================


@on_start("image")
def start_image(state: ParserState, out, attrs) -> None:
    url = attrs.get("href", "") or attrs.get("url", "")
    if state.item is not None:
        state.item.image_scope = ImageScope(url=url.strip())
    elif state.channel is not None:
        state.channel.image = ImageScope(url=url.strip())


@contextual
def image_url_text(state: ParserState, out, key: str, text: str) -> None:
    if key != "url":
        return
    scope = state.item.image_scope if state.item is not None else (
        state.channel.image if state.channel is not None else None
    )
    if scope is not None:
        _keep_first(scope, "url", text)


@on_end("image")
def end_image(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        scope, state.item.image_scope = state.item.image_scope, None
        if scope is not None:
            _keep_first(state.item, "image", scope.url)
    elif state.channel is not None:
        scope, state.channel.image = state.channel.image, None
        if scope is not None:
            _keep_first(state.channel, "image_url", scope.url)


@on_end("logo", "atom:logo")
def end_logo(state: ParserState, out, text: str) -> None:
    channel = _channel_only(state)
    if channel is not None:
        _keep_first(channel, "image_url", text)


@on_start("itunes:image")
def start_itunes_image(state: ParserState, out, attrs) -> None:
    href = attrs.get("href", "")
    target = state.item if state.item is not None else _channel_only(state)
    if target is not None:
        _keep_first(target, "itunes_image", href.strip())


@on_end("itunes:image")
def end_itunes_image(state: ParserState, out, text: str) -> None:
    target = state.item if state.item is not None else _channel_only(state)
    if target is not None:
        _keep_first(target, "itunes_image", text.strip())


# ============================================================================
# iTunes owner, locked flag, funding, categories
# ============================================================================


@on_start("itunes:owner")
def start_owner(state: ParserState, out, attrs) -> None:
    channel = _channel_only(state)
    if channel is not None:
        channel.owner = OwnerScope()


@contextual
def owner_text(state: ParserState, out, key: str, text: str) -> None:
    if state.channel is None or state.channel.owner is None:
        return
    owner = state.channel.owner
    if key in ("name", "itunes:name"):
        owner.name += text
    elif key in ("email", "itunes:email"):
        owner.email += text


@on_end("itunes:owner")
def end_owner(state: ParserState, out, text: str) -> None:
    channel = state.channel
    if channel is None or channel.owner is None:
        return
    owner, channel.owner = channel.owner, None
    _keep_first(channel, "owner_name", owner.name.strip())
    _keep_first(channel, "owner_email", owner.email.strip())


@on_start("podcast:locked")
def start_locked(state: ParserState, out, attrs) -> None:
    channel = _channel_only(state)
    if channel is not None:
        channel.locked_open = True
        _keep_first(channel, "locked_owner", attrs.get("owner", "").strip())


@contextual
def locked_text(state: ParserState, out, key: str, text: str) -> None:
    channel = state.channel
    if key == "podcast:locked" and channel is not None and channel.locked_open:
        channel.locked = resolvers.parse_locked(text)
        channel.locked_open = False


@on_start("podcast:funding")
def start_funding(state: ParserState, out, attrs) -> None:
    scope = FundingScope(url=attrs.get("url", "").strip())
    if state.item is not None:
        state.item.funding = scope
    elif _channel_only(state) is not None:
        state.channel.funding = scope


@contextual
def funding_text(state: ParserState, out, key: str, text: str) -> None:
    if key != "podcast:funding":
        return
    target = state.item if state.item is not None else state.channel
    if target is None or target.funding is None:
        return
    scope, target.funding = target.funding, None
    scope.text = text.strip()
    if scope.url and not target.funding_url:
        target.funding_url = scope.url
        target.funding_text = scope.text


@on_start("itunes:category")
def start_itunes_category(state: ParserState, out, attrs) -> None:
    channel = _channel_only(state)
    label = attrs.get("text", "").strip()
    if channel is not None and label:
        channel.categories.append(label)


@on_start("category", "atom:category")
def start_category(state: ParserState, out, attrs) -> None:
    channel = _channel_only(state)
    if channel is None:
        return
    label = (attrs.get("text", "") or attrs.get("term", "")).strip()
    if label:
        channel.categories.append(label)
    else:
        channel.category_open = True


@contextual
def category_text(state: ParserState, out, key: str, text: str) -> None:
    channel = state.channel
    if key not in ("category", "atom:category") or channel is None or not channel.category_open:
        return
    channel.category_open = False
    if text.strip():
        channel.categories.append(text.strip())


# ============================================================================
# Value for value
# ============================================================================


@on_start("podcast:value")
def start_value(state: ParserState, out, attrs) -> None:
    block = ValueBlock.from_attributes(attrs)
    if state.item is not None:
        state.item.value_block = block
    elif _channel_only(state) is not None:
        state.channel.value_block = block


@on_start("podcast:valueRecipient")
def start_value_recipient(state: ParserState, out, attrs) -> None:
    target = state.item if state.item is not None else state.channel
    if target is not None and target.value_block is not None:
        target.value_block.add_recipient(ValueRecipient.from_attributes(attrs))


@on_end("podcast:value")
def end_value(state: ParserState, out, text: str) -> None:
    target = state.item if state.item is not None else state.channel
    if target is None or target.value_block is None:
        return
    block, target.value_block = target.value_block, None
    if target is state.item and not target.has_valid_enclosure:
        return
    target.value.offer(block)


# ============================================================================
# Item-only scalars
# ============================================================================


@on_end("itunes:duration")
def end_duration(state: ParserState, out, text: str) -> None:
    item = state.item
    if item is not None and not item.in_alternate_enclosure:
        _keep_first(item, "itunes_duration", text)


@on_end("itunes:episode")
def end_episode(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "itunes_episode", text)


@on_end("itunes:season")
def end_season(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "itunes_season", text)


@on_end("itunes:episodeType")
def end_episode_type(state: ParserState, out, text: str) -> None:
    if state.item is not None:
        _keep_first(state.item, "itunes_episode_type", text)


@on_start("podcast:alternateEnclosure")
def start_alternate_enclosure(state: ParserState, out, attrs) -> None:
    if state.item is not None:
        state.item.alternate_enclosure_depth += 1


@on_end("podcast:alternateEnclosure")
def end_alternate_enclosure(state: ParserState, out, text: str) -> None:
    if state.item is not None and state.item.alternate_enclosure_depth:
        state.item.alternate_enclosure_depth -= 1


# ============================================================================
# Item child entities (emitted at their own close)
# ============================================================================


@on_start("podcast:transcript")
def start_transcript(state: ParserState, out, attrs) -> None:
    item = state.item
    if item is not None and not item.in_alternate_enclosure:
        item.transcript = LinkedFileScope(
            url=attrs.get("url", "").strip(), mime_type=attrs.get("type", "").strip()
        )


@on_end("podcast:transcript")
def end_transcript(state: ParserState, out, text: str) -> None:
    item = state.item
    if item is None or item.transcript is None:
        return
    scope, item.transcript = item.transcript, None
    if item.has_valid_enclosure:
        _emit(out, builders.build_transcript(scope, state))


@on_start("podcast:chapters")
def start_chapters(state: ParserState, out, attrs) -> None:
    item = state.item
    if item is not None and not item.in_alternate_enclosure:
        item.chapters = LinkedFileScope(
            url=attrs.get("url", "").strip(), mime_type=attrs.get("type", "").strip()
        )


@on_end("podcast:chapters")
def end_chapters(state: ParserState, out, text: str) -> None:
    item = state.item
    if item is None or item.chapters is None:
        return
    scope, item.chapters = item.chapters, None
    if item.has_valid_enclosure:
        _emit(out, builders.build_chapters(scope, state))


@on_start("podcast:soundbite")
def start_soundbite(state: ParserState, out, attrs) -> None:
    if state.item is not None:
        state.item.soundbite = SoundbiteScope(
            start_time=attrs.get("startTime", ""), duration=attrs.get("duration", "")
        )


@contextual
def soundbite_text(state: ParserState, out, key: str, text: str) -> None:
    item = state.item
    if key != "podcast:soundbite" or item is None or item.soundbite is None:
        return
    scope, item.soundbite = item.soundbite, None
    if item.has_valid_enclosure:
        _emit(out, builders.build_soundbite(scope, text, state))


@on_start("podcast:person")
def start_person(state: ParserState, out, attrs) -> None:
    if state.item is not None:
        state.item.person = PersonScope(
            role=attrs.get("role", ""),
            group=attrs.get("group", ""),
            img=attrs.get("img", ""),
            href=attrs.get("href", ""),
        )


@contextual
def person_text(state: ParserState, out, key: str, text: str) -> None:
    item = state.item
    if key != "podcast:person" or item is None or item.person is None:
        return
    scope, item.person = item.person, None
    if item.has_valid_enclosure:
        _emit(out, builders.build_person(scope, text, state))
