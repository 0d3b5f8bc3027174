"""
Events emitted by the game engine, and the reporters that consume them.

The engine never prints. Everything a spectator could want to know (card
counts after each transfer, who is on offence after each swap, how each
showdown ended, who won) travels as one of the event dataclasses below.
"""

from typing import List, Tuple, Sequence, TYPE_CHECKING
from enum import Enum, auto
from dataclasses import dataclass
from abc import ABC, abstractmethod

from src.common.logging_utils import get_logger
from src.engine.cards import Card

if TYPE_CHECKING:
    from src.engine.game import PlayerId


log = get_logger('engine.events')


class ShowdownOutcome(Enum):
    defence_out_of_cards = auto()
    chances_exhausted    = auto()
    resolved_deeper      = auto()


@dataclass(frozen=True)
class Event:
    pass


@dataclass(frozen=True)
class GameStarted(Event):
    offence        : 'PlayerId'
    defence        : 'PlayerId'
    player_count   : int
    computer_count : int


@dataclass(frozen=True)
class TurnStarted(Event):
    turn    : int
    offence : 'PlayerId'


@dataclass(frozen=True)
class CardPlayed(Event):
    player : 'PlayerId'
    card   : Card
    pot    : Tuple[Card, ...]
    depth  : int


@dataclass(frozen=True)
class RolesChanged(Event):
    offence        : 'PlayerId'
    defence        : 'PlayerId'
    player_count   : int
    computer_count : int


@dataclass(frozen=True)
class ShowdownStarted(Event):
    defence : 'PlayerId'
    chances : int
    depth   : int


@dataclass(frozen=True)
class ShowdownChance(Event):
    defence : 'PlayerId'
    chance  : int
    depth   : int


@dataclass(frozen=True)
class ShowdownEnded(Event):
    reason  : ShowdownOutcome
    defence : 'PlayerId'
    depth   : int


@dataclass(frozen=True)
class PotAwarded(Event):
    winner         : 'PlayerId'
    cards          : Tuple[Card, ...]
    player_count   : int
    computer_count : int


@dataclass(frozen=True)
class GameEnded(Event):
    winner         : 'PlayerId'
    player_cards   : Tuple[Card, ...]
    computer_cards : Tuple[Card, ...]
    turns          : int


class Reporter(ABC):
    @abstractmethod
    def report(self, event: Event):
        raise NotImplementedError


class NullReporter(Reporter):
    def report(self, event: Event):
        pass


class EventLog(Reporter):
    """Keeps every event in order, for tests and replays."""

    def __init__(self):
        self.events: List[Event] = []

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)

    def report(self, event: Event):
        self.events.append(event)

    def of_type(self, event_type: type) -> List[Event]:
        return [
            event
            for event in self.events
            if isinstance(event, event_type)
        ]


class LoggingReporter(Reporter):
    def report(self, event: Event):
        log.info('%s', event)


class MultiReporter(Reporter):
    def __init__(self, reporters: Sequence[Reporter]):
        self.reporters = list(reporters)

    def report(self, event: Event):
        for reporter in self.reporters:
            reporter.report(event)
