from typing import List, Optional
from enum import Enum, IntEnum, auto
from dataclasses import dataclass
from functools import total_ordering
import random


class Suit(Enum):
    d = auto()
    c = auto()
    s = auto()
    h = auto()


class Rank(IntEnum):
    ace   = 1
    two   = 2
    three = 3
    four  = 4
    five  = 5
    six   = 6
    seven = 7
    eight = 8
    nine  = 9
    ten   = 10
    jack  = 11
    queen = 12
    king  = 13


RANK_SYMBOLS = 'A23456789TJQK'

symbol_to_rank = dict(zip(RANK_SYMBOLS, Rank))
rank_to_symbol = {rank: symbol for symbol, rank in symbol_to_rank.items()}

suit_names = {
    Suit.d: 'Diamonds',
    Suit.c: 'Clubs',
    Suit.s: 'Spades',
    Suit.h: 'Hearts',
}

# How many cards the defence may play to answer a face card
SHOWDOWN_CHANCES = {
    Rank.ace   : 4,
    Rank.king  : 3,
    Rank.queen : 2,
    Rank.jack  : 1,
}


class InsufficientCards(ValueError):
    """Raised when the deck cannot supply the requested number of cards."""


@total_ordering
@dataclass(frozen=True)
class Card:
    suit: Suit
    rank: Rank

    @classmethod
    def from_str(cls, spec: str) -> 'Card':
        """Build a Card from a 2-char spec like 'As', 'Td', '7h'."""
        if len(spec) != 2:
            raise ValueError(f'Invalid card spec: {spec!r}')
        rank_char, suit_char = spec[0].upper(), spec[1].lower()
        if rank_char not in symbol_to_rank or suit_char not in Suit.__members__:
            raise ValueError(f'Invalid card spec: {spec!r}')

        return cls(Suit[suit_char], symbol_to_rank[rank_char])

    def __repr__(self) -> str:
        return f'{rank_to_symbol[self.rank]}{self.suit.name}'

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented

        return (self.rank, self.suit.value) < (other.rank, other.suit.value)

    @property
    def is_face_card(self) -> bool:
        return self.rank in SHOWDOWN_CHANCES


def is_face_card(card: Card) -> bool:
    return card.is_face_card


def showdown_chances(card: Card) -> int:
    return SHOWDOWN_CHANCES.get(card.rank, 0)


def describe_card(card: Card) -> str:
    return f'{card.rank.name.capitalize()} of {suit_names[card.suit]}'


def new_deck() -> List[Card]:
    return [
        Card(suit, rank)
        for suit in Suit
        for rank in Rank
    ]


class CardDeck():
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng   = rng if rng is not None else random.Random()
        self.cards = new_deck()
        self.rng.shuffle(self.cards)

    def __repr__(self) -> str:
        return ' '.join(repr(card) for card in self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def deal_random(self, n: int) -> List[Card]:
        if n < 0:
            raise InsufficientCards(f'Cannot deal {n} cards.')
        if n > len(self):
            raise InsufficientCards(
                f'Cannot deal {n} cards, only {len(self)} left in the deck.'
            )

        positions = self.rng.sample(range(len(self.cards)), n)
        dealt     = [self.cards[i] for i in positions]
        taken     = set(positions)
        self.cards = [
            card
            for i, card in enumerate(self.cards)
            if i not in taken
        ]

        return dealt
