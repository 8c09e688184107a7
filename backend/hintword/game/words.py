from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol, Sequence


@dataclass(frozen=True)
class WordEntry:
    word: str
    hints: tuple[str, ...]


class WordProvider(Protocol):
    def draw(self, exclude: str | None = None) -> WordEntry: ...


DEFAULT_WORDS: list[WordEntry] = [
    WordEntry("ELEPHANT", ("It's a large mammal", "It has a trunk", "It's found in Africa and Asia", "It's gray in color")),
    WordEntry("COMPUTER", ("It's an electronic device", "You use it to browse the internet", "It has a keyboard and screen", "It processes data")),
    WordEntry("MOUNTAIN", ("It's a natural landform", "It's very tall", "People climb it", "It's made of rock")),
    WordEntry("OCEAN", ("It's a large body of water", "It's saltwater", "It covers most of Earth", "It's home to many creatures")),
    WordEntry("LIBRARY", ("It's a place with books", "People go there to read", "It's usually quiet", "It has many shelves")),
    WordEntry("BUTTERFLY", ("It's an insect", "It has colorful wings", "It starts as a caterpillar", "It flies from flower to flower")),
    WordEntry("TELEPHONE", ("It's a communication device", "You use it to call people", "It has numbers on it", "It can be mobile or landline")),
    WordEntry("GARDEN", ("It's an outdoor space", "People grow plants here", "It can have flowers or vegetables", "It needs water and sunlight")),
    WordEntry("KEYBOARD", ("It's an input device", "It has letters and numbers", "You type on it", "It's used with computers")),
    WordEntry("RAINBOW", ("It appears in the sky", "It has many colors", "It appears after rain", "It's an arc shape")),
    WordEntry("TREASURE", ("It's valuable", "Pirates search for it", "It's often hidden", "It can be gold or jewels")),
    WordEntry("VOLCANO", ("It's a mountain", "It can erupt", "It spews lava", "It's very hot")),
    WordEntry("TELESCOPE", ("It's used to look at stars", "It makes distant things appear closer", "Astronomers use it", "It has lenses")),
    WordEntry("ADVENTURE", ("It's an exciting experience", "It involves exploring", "It can be dangerous", "It's thrilling")),
    WordEntry("MYSTERY", ("It's something unknown", "Detectives solve it", "It's puzzling", "It needs investigation")),
]


class RandomWordProvider:
    def __init__(self, entries: Sequence[WordEntry] | None = None, rng: random.Random | None = None) -> None:
        words = list(entries if entries is not None else DEFAULT_WORDS)
        if not words:
            raise ValueError("word provider needs at least one entry")
        self._entries = [WordEntry(e.word.strip().upper(), tuple(e.hints)) for e in words]
        self._rng = rng or random.Random()

    def draw(self, exclude: str | None = None) -> WordEntry:
        pool = self._entries
        if exclude and len(pool) > 1:
            pool = [e for e in pool if e.word != exclude.upper()] or self._entries
        return self._rng.choice(pool)
