# ABOUTME: Closed genre/publisher enums and the ordered keyword rules that infer them.
# ABOUTME: Maps free-text subject tags and publisher names onto the catalog's fixed sets.

import logging
from collections.abc import Iterable, Sequence
from enum import Enum

logger = logging.getLogger(__name__)


class Genre(Enum):
    """Book genres known to the catalog. OTHER is the explicit fallback."""

    FICTION = "Fiction"
    NON_FICTION = "NonFiction"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    SCIENCE_FICTION = "ScienceFiction"
    FANTASY = "Fantasy"
    HORROR = "Horror"
    THRILLER = "Thriller"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SCIENCE = "Science"
    TECHNOLOGY = "Technology"
    PHILOSOPHY = "Philosophy"
    RELIGION = "Religion"
    SELF_HELP = "SelfHelp"
    BUSINESS = "Business"
    ECONOMICS = "Economics"
    POLITICS = "Politics"
    TRAVEL = "Travel"
    COOKBOOK = "Cookbook"
    POETRY = "Poetry"
    DRAMA = "Drama"
    OTHER = "Other"


class Publisher(Enum):
    """Publishers known to the catalog. OTHER is the explicit fallback."""

    PENGUIN_RANDOM_HOUSE = "PenguinRandomHouse"
    HARPER_COLLINS = "HarperCollins"
    SIMON_SCHUSTER = "SimonSchuster"
    HACHETTE_BOOK_GROUP = "HachetteBookGroup"
    MACMILLAN = "Macmillan"
    SCHOLASTIC = "Scholastic"
    BLOOMSBURY = "Bloomsbury"
    FABER_FABER = "FaberFaber"
    VINTAGE = "Vintage"
    ANCHOR = "Anchor"
    DOUBLEDAY = "Doubleday"
    KNOPF = "Knopf"
    CROWN = "Crown"
    BALLANTINE = "Ballantine"
    BANTAM = "Bantam"
    DELL = "Dell"
    OTHER = "Other"


# Order matters: the first rule with a keyword found in any tag wins.
# The bare "fiction" keyword comes last so that "science fiction" and
# "juvenile fiction" reach their more specific rules first.
_GENRE_RULES: tuple[tuple[tuple[str, ...], Genre], ...] = (
    (("romance",), Genre.FICTION),
    (("mystery", "thriller"), Genre.MYSTERY),
    (("science fiction", "fantasy"), Genre.SCIENCE_FICTION),
    (("horror",), Genre.HORROR),
    (("biography", "autobiography"), Genre.BIOGRAPHY),
    (("history",), Genre.HISTORY),
    (("science", "technology"), Genre.SCIENCE),
    (("philosophy", "religion"), Genre.PHILOSOPHY),
    (("business", "economics"), Genre.BUSINESS),
    (("poetry",), Genre.POETRY),
    (("drama", "plays"), Genre.DRAMA),
    (("cookbook", "cooking"), Genre.COOKBOOK),
    (("travel",), Genre.TRAVEL),
    (("juvenile", "children"), Genre.FICTION),
    (("fiction",), Genre.FICTION),
)

# Substring table; "puffin" is a Penguin imprint and "dell" belongs to Bantam Dell.
_PUBLISHER_RULES: tuple[tuple[tuple[str, ...], Publisher], ...] = (
    (("penguin", "random house"), Publisher.PENGUIN_RANDOM_HOUSE),
    (("harper", "collins"), Publisher.HARPER_COLLINS),
    (("simon", "schuster"), Publisher.SIMON_SCHUSTER),
    (("hachette",), Publisher.HACHETTE_BOOK_GROUP),
    (("macmillan",), Publisher.MACMILLAN),
    (("scholastic",), Publisher.SCHOLASTIC),
    (("bloomsbury",), Publisher.BLOOMSBURY),
    (("faber",), Publisher.FABER_FABER),
    (("vintage",), Publisher.VINTAGE),
    (("anchor",), Publisher.ANCHOR),
    (("doubleday",), Publisher.DOUBLEDAY),
    (("knopf",), Publisher.KNOPF),
    (("crown",), Publisher.CROWN),
    (("ballantine",), Publisher.BALLANTINE),
    (("bantam",), Publisher.BANTAM),
    (("dell",), Publisher.BANTAM),
    (("puffin",), Publisher.PENGUIN_RANDOM_HOUSE),
)


def _any_contains(texts: Iterable[str], keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for text in texts for keyword in keywords)


def infer_genre(tags: Sequence[str]) -> Genre:
    """Infer a genre from free-text subject tags.

    Tags are lower-cased and tested against the ordered rule list; the first
    rule matching any tag decides. No tags or no match gives Genre.OTHER.
    """
    lowered = [tag.lower() for tag in tags if tag]
    if not lowered:
        return Genre.OTHER

    for keywords, genre in _GENRE_RULES:
        if _any_contains(lowered, keywords):
            logger.debug("Genre %s inferred from subjects %s", genre.value, lowered[:10])
            return genre
    return Genre.OTHER


def map_publisher(name: str | None) -> Publisher:
    """Map a free-text publisher name onto the closed Publisher set.

    Matching is case-insensitive substring matching, so partial names like
    "Puffin Books" or "HarperCollins Publishers" still resolve.
    """
    if not name or not name.strip():
        return Publisher.OTHER

    lowered = name.lower()
    for keywords, publisher in _PUBLISHER_RULES:
        if _any_contains((lowered,), keywords):
            logger.debug("Publisher %r mapped to %s", name, publisher.value)
            return publisher
    return Publisher.OTHER

