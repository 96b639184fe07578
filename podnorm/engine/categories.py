"""
Category mapping onto the podcast index taxonomy.

Category labels such as ``"Society & Culture"`` or ``"Video Games"`` are
split into words, normalized, and looked up in a fixed name table. Word
pairs that only mean something together (``video`` + ``games``) are
rebuilt into their compound entry.
"""

import re
from typing import Dict, Iterable, List

CATEGORY_SLOTS = 10
MAX_MAPPED_CATEGORIES = 8

TAXONOMY: Dict[str, int] = {
    "arts": 1,
    "books": 2,
    "design": 3,
    "fashion": 4,
    "beauty": 5,
    "food": 6,
    "performing": 7,
    "visual": 8,
    "business": 9,
    "careers": 10,
    "entrepreneurship": 11,
    "investing": 12,
    "management": 13,
    "marketing": 14,
    "nonprofit": 15,
    "comedy": 16,
    "interviews": 17,
    "improv": 18,
    "standup": 19,
    "education": 20,
    "courses": 21,
    "howto": 22,
    "language": 23,
    "learning": 24,
    "selfimprovement": 25,
    "fiction": 26,
    "drama": 27,
    "history": 28,
    "health": 29,
    "fitness": 30,
    "alternative": 31,
    "medicine": 32,
    "mental": 33,
    "nutrition": 34,
    "sexuality": 35,
    "kids": 36,
    "family": 37,
    "parenting": 38,
    "pets": 39,
    "animals": 40,
    "stories": 41,
    "leisure": 42,
    "animation": 43,
    "manga": 44,
    "automotive": 45,
    "aviation": 46,
    "crafts": 47,
    "games": 48,
    "hobbies": 49,
    "home": 50,
    "garden": 51,
    "videogames": 52,
    "music": 53,
    "commentary": 54,
    "news": 55,
    "daily": 56,
    "entertainment": 57,
    "government": 58,
    "politics": 59,
    "buddhism": 60,
    "christianity": 61,
    "hinduism": 62,
    "islam": 63,
    "judaism": 64,
    "religion": 65,
    "spirituality": 66,
    "science": 67,
    "astronomy": 68,
    "chemistry": 69,
    "earth": 70,
    "life": 71,
    "mathematics": 72,
    "natural": 73,
    "nature": 74,
    "physics": 75,
    "social": 76,
    "society": 77,
    "culture": 78,
    "documentary": 79,
    "personal": 80,
    "journals": 81,
    "philosophy": 82,
    "places": 83,
    "travel": 84,
    "relationships": 85,
    "sports": 86,
    "baseball": 87,
    "basketball": 88,
    "cricket": 89,
    "fantasy": 90,
    "football": 91,
    "golf": 92,
    "hockey": 93,
    "rugby": 94,
    "running": 95,
    "soccer": 96,
    "swimming": 97,
    "tennis": 98,
    "volleyball": 99,
    "wilderness": 100,
    "wrestling": 101,
    "technology": 102,
    "truecrime": 103,
    "tv": 104,
    "film": 105,
    "aftershows": 106,
    "reviews": 107,
    "climate": 108,
    "weather": 109,
    "tabletop": 110,
    "roleplaying": 111,
    "cryptocurrency": 112,
}

COMPOUND_TOKENS = (
    ("video", "games", "videogames"),
    ("true", "crime", "truecrime"),
    ("after", "shows", "aftershows"),
    ("self", "improvement", "selfimprovement"),
    ("how", "to", "howto"),
)

_WORD_SPLIT = re.compile(r"[\s&]+")


def normalize_token(token: str) -> str:
    """Lower-case and drop spaces and hyphens."""
    return token.lower().replace(" ", "").replace("-", "")


def tokenize(raw_categories: Iterable[str]) -> List[str]:
    """Normalize raw labels into tokens, keeping order.

    A label the taxonomy knows as a whole (``Video Games``) stays one token;
    any other label is split into its words.
    """
    tokens = []
    for raw in raw_categories:
        whole = normalize_token((raw or "").strip())
        if whole in TAXONOMY:
            tokens.append(whole)
            continue
        for word in _WORD_SPLIT.split(raw or ""):
            normalized = normalize_token(word)
            if normalized:
                tokens.append(normalized)
    return tokens


def dedupe_adjacent(tokens: List[str]) -> List[str]:
    deduped: List[str] = []
    for token in tokens:
        if not deduped or deduped[-1] != token:
            deduped.append(token)
    return deduped


def add_compounds(tokens: List[str]) -> List[str]:
    """Append compound tokens whose two halves both occur somewhere in the list."""
    present = set(tokens)
    result = list(tokens)
    for first, second, compound in COMPOUND_TOKENS:
        if first in present and second in present and compound not in present:
            result.append(compound)
            present.add(compound)
    return result


def build_category_vector(raw_categories: Iterable[str]) -> List[int]:
    """Map raw category labels onto a 10-slot id vector.

    Slot 0 is never used. Up to eight known categories fill slots 1..8 in
    encounter order; unknown tokens do not take a slot.
    """
    vector = [0] * CATEGORY_SLOTS
    tokens = add_compounds(dedupe_adjacent(tokenize(raw_categories)))

    filled = 0
    for token in tokens:
        if filled >= MAX_MAPPED_CATEGORIES:
            break
        category_id = TAXONOMY.get(token, 0)
        if category_id:
            filled += 1
            vector[filled] = category_id

    return vector


def has_categories(vector: List[int]) -> bool:
    return any(vector)
