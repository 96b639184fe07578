"""
Record builders.

Turn a finished channel, item or child scope into the row handed to the
sink, applying field resolution and the legacy column widths.
"""

from typing import Optional

from . import resolvers
from .categories import build_category_vector, has_categories
from .frequency import update_frequency
from .hashing import channel_content_hash
from .state import (
    ChannelMetrics,
    ChannelState,
    ItemState,
    LinkedFileScope,
    ParserState,
    PersonScope,
    SoundbiteScope,
)
from .value_block import ValueBlock
from ..output.records import Record, Table
from ..utils.sanitizers import (
    FieldLimits,
    parse_enclosure_length,
    parse_optional_int,
    sanitize_url,
    truncate,
)


# ============================================================================
# Channel
# ============================================================================


def build_newsfeed(
    channel: ChannelState, metrics: ChannelMetrics, feed_id: Optional[int], now: int
) -> Record:
    title = channel.title.strip()
    link = channel.link.strip()
    language = channel.language.strip()
    generator = channel.generator.strip()
    itunes_author = channel.itunes_author.strip()
    owner_name = channel.owner_name.strip()
    owner_email = channel.owner_email.strip()
    itunes_image = channel.itunes_image.strip()

    chash = channel_content_hash(
        title, link, language, generator, itunes_author, owner_name, owner_email
    )

    return Record.from_pairs(
        Table.NEWSFEEDS,
        [
            ("id", feed_id),
            ("title", title),
            ("url", link),
            ("content", resolvers.resolve_channel_description(channel)),
            ("language", truncate(language, FieldLimits.CHANNEL_LANGUAGE)),
            ("generator", generator),
            ("itunes_author", itunes_author),
            ("itunes_owner_name", owner_name),
            ("itunes_owner_email", owner_email),
            ("itunes_type", channel.itunes_type.strip()),
            ("itunes_new_feed_url", channel.itunes_new_feed_url.strip()),
            ("explicit", resolvers.parse_explicit(channel.explicit)),
            ("image", resolvers.resolve_channel_image(channel)),
            ("itunes_image", itunes_image),
            ("podcast_locked", channel.locked),
            (
                "podcast_owner",
                truncate(resolvers.resolve_podcast_owner(channel), FieldLimits.PODCAST_OWNER),
            ),
            ("artwork_url_600", itunes_image),
            ("item_count", metrics.item_count),
            ("newest_item_pubdate", metrics.newest_pubdate),
            ("oldest_item_pubdate", metrics.oldest_pubdate),
            ("chash", chash),
            ("podcast_chapters", metrics.item_hash.hexdigest()),
            ("update_frequency", update_frequency(metrics.pubdates, now)),
            ("itunes_id", 0),
        ],
        feed_id=feed_id,
    )


def build_blank_newsfeed(feed_id: Optional[int], now: int) -> Record:
    """Row for a feed whose download had no document body."""
    return build_newsfeed(ChannelState(), ChannelMetrics(), feed_id, now)


def build_channel_guid(channel: ChannelState, feed_id: Optional[int]) -> Optional[Record]:
    guid = channel.podcast_guid.strip()
    if not guid:
        return None
    return Record.from_pairs(Table.NFGUIDS, [("feedid", feed_id), ("guid", guid)], feed_id)


def build_pubsub(channel: ChannelState, feed_id: Optional[int]) -> Optional[Record]:
    hub_url = channel.hub_url.strip()
    self_url = channel.self_url.strip()
    if not hub_url and not self_url:
        return None
    return Record.from_pairs(
        Table.PUBSUB,
        [("feedid", feed_id), ("hub_url", hub_url), ("self_url", self_url)],
        feed_id,
    )


def build_channel_funding(channel: ChannelState, feed_id: Optional[int]) -> Optional[Record]:
    url = channel.funding_url.strip()
    if not url:
        return None
    return Record.from_pairs(
        Table.NFFUNDING,
        [("feedid", feed_id), ("url", url), ("message", channel.funding_text.strip())],
        feed_id,
    )


def build_categories(channel: ChannelState, feed_id: Optional[int]) -> Optional[Record]:
    vector = build_category_vector(channel.categories)
    if not has_categories(vector):
        return None
    pairs = [("feedid", feed_id)]
    pairs.extend((f"catid{slot}", vector[slot]) for slot in range(1, len(vector)))
    return Record.from_pairs(Table.NFCATEGORIES, pairs, feed_id)


def build_channel_value(
    block: ValueBlock, feed_id: Optional[int], now: int
) -> Record:
    return Record.from_pairs(
        Table.NFVALUE,
        [
            ("feedid", feed_id),
            ("value_block", block.to_json()),
            ("type", block.type_code),
            ("createdon", now),
        ],
        feed_id,
    )


# ============================================================================
# Item
# ============================================================================


def build_item(
    item: ItemState,
    state: ParserState,
    title: str,
    guid: str,
    enclosure_type: str,
    pubdate: int,
) -> Record:
    """Row for a finished item whose effective fields were already resolved."""
    return Record.from_pairs(
        Table.NFITEMS,
        [
            ("feedid", state.feed_id),
            ("itemid", state.item_id()),
            ("title", truncate(title, FieldLimits.ITEM_TITLE)),
            ("link", item.link.strip()),
            ("description", resolvers.resolve_item_description(item)),
            ("timestamp", pubdate),
            ("itunes_image", item.itunes_image.strip()),
            ("image", resolvers.resolve_item_image(item, state.channel)),
            ("guid", truncate(guid, FieldLimits.ITEM_GUID)),
            ("itunes_duration", resolvers.parse_duration(item.itunes_duration)),
            ("itunes_episode", parse_optional_int(item.itunes_episode)),
            ("itunes_season", parse_optional_int(item.itunes_season)),
            ("itunes_episode_type", item.itunes_episode_type.strip()),
            ("itunes_explicit", resolvers.parse_explicit(item.itunes_explicit)),
            ("enclosure_url", sanitize_url(item.enclosure_url, FieldLimits.ENCLOSURE_URL)),
            ("enclosure_length", parse_enclosure_length(item.enclosure_length)),
            ("enclosure_type", truncate(enclosure_type, FieldLimits.ENCLOSURE_TYPE)),
            ("podcast_funding_url", item.funding_url.strip()),
            ("podcast_funding_text", item.funding_text.strip()),
            ("timeadded", state.now),
            ("purge", 0),
        ],
        feed_id=state.feed_id,
    )


def build_item_value(block: ValueBlock, state: ParserState) -> Record:
    return Record.from_pairs(
        Table.NFITEM_VALUE,
        [
            ("itemid", state.item_id()),
            ("value_block", block.to_json()),
            ("type", block.type_code),
            ("createdon", state.now),
        ],
        state.feed_id,
    )


def build_transcript(scope: LinkedFileScope, state: ParserState) -> Optional[Record]:
    url = scope.url.strip()
    if not url:
        return None
    return Record.from_pairs(
        Table.NFITEM_TRANSCRIPTS,
        [
            ("itemid", state.item_id()),
            ("url", url),
            ("type", resolvers.transcript_type_code(scope.mime_type)),
        ],
        state.feed_id,
    )


def build_chapters(scope: LinkedFileScope, state: ParserState) -> Optional[Record]:
    url = scope.url.strip()
    if not url:
        return None
    return Record.from_pairs(
        Table.NFITEM_CHAPTERS,
        [
            ("itemid", state.item_id()),
            ("url", url),
            ("type", resolvers.chapters_type_code(scope.mime_type)),
        ],
        state.feed_id,
    )


def build_soundbite(
    scope: SoundbiteScope, title: str, state: ParserState
) -> Optional[Record]:
    start_time = resolvers.parse_time_offset(scope.start_time)
    duration = resolvers.parse_time_offset(scope.duration)
    if start_time is None or duration is None:
        return None
    return Record.from_pairs(
        Table.NFITEM_SOUNDBITES,
        [
            ("itemid", state.item_id()),
            ("title", truncate(title.strip(), FieldLimits.SOUNDBITE_TITLE)),
            ("start_time", start_time),
            ("duration", duration),
        ],
        state.feed_id,
    )


def build_person(scope: PersonScope, name: str, state: ParserState) -> Optional[Record]:
    name = name.strip()
    if not name:
        return None
    return Record.from_pairs(
        Table.NFITEM_PERSONS,
        [
            ("itemid", state.item_id()),
            ("name", truncate(name, FieldLimits.PERSON_TEXT)),
            ("role", truncate(scope.role.strip(), FieldLimits.PERSON_TEXT)),
            ("grp", truncate(scope.group.strip(), FieldLimits.PERSON_TEXT)),
            ("img", sanitize_url(scope.img, FieldLimits.PERSON_URL)),
            ("href", sanitize_url(scope.href, FieldLimits.PERSON_URL)),
        ],
        state.feed_id,
    )
