from typing import Dict, Iterable, Iterator, List, Optional, Sequence, cast
from enum import Enum, auto
from dataclasses import dataclass
import random

from src.common.logging_utils import get_logger
from src.engine.cards import Card, CardDeck, showdown_chances
from src.engine.events import (
    Reporter, NullReporter, ShowdownOutcome,
    GameStarted, TurnStarted, CardPlayed, RolesChanged,
    ShowdownStarted, ShowdownChance, ShowdownEnded, PotAwarded, GameEnded,
)


log = get_logger('engine.game')

HAND_SIZE = 26


class PlayerId(Enum):
    player   = auto()
    computer = auto()


class Role(Enum):
    offence = auto()
    defence = auto()


class GameStatus(Enum):
    playing  = auto()
    showdown = auto()
    over     = auto()


class EmptyHand(ValueError):
    """Raised when a card is requested from a hand that has none."""


class GameFinished(ValueError):
    """Raised when a turn is requested after the game has ended."""


class InvariantViolation(AssertionError):
    """Raised when cards appear or vanish between hands and the pot."""


class TurnLimitReached(RuntimeError):
    """Raised by GameLoop when max_turns runs out before a winner."""


class Hand():
    def __init__(self, label: str, cards: Optional[List[Card]] = None):
        self.label = label
        if cards is None:
            self.cards = []
        else:
            self.cards = list(cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __repr__(self) -> str:
        return f'{self.label}: ' + ' '.join(repr(card) for card in self.cards)

    def push_back(self, card: Card):
        self.cards.append(card)

    def push_front(self, cards: Iterable[Card]):
        self.cards[:0] = list(cards)

    def pop_front(self) -> Card:
        if len(self) == 0:
            raise EmptyHand(f'The {self.label} hand is empty.')

        return self.cards.pop(0)

    def clear(self) -> List[Card]:
        cards, self.cards = self.cards, []
        return cards

    @property
    def top_card(self) -> Optional[Card]:
        if len(self) == 0:
            return None

        return self.cards[-1]


@dataclass
class ShowdownFrame:
    chances : int
    offence : PlayerId
    defence : PlayerId
    depth   : int
    used    : int = 0


class Game():
    def __init__(
            self,
            rng      : Optional[random.Random] = None,
            reporter : Optional[Reporter] = None,
            deck     : Optional[CardDeck] = None,
            dealt    : Optional[Dict[PlayerId, List[Card]]] = None,
    ):
        if dealt is None:
            if deck is None:
                deck = CardDeck(rng)
            # The deck is used for the initial deal only
            dealt = {
                player_id: deck.deal_random(HAND_SIZE)
                for player_id in PlayerId
            }
        self.hands = {
            player_id: Hand(player_id.name, dealt[player_id])
            for player_id in PlayerId
        }
        self.reporter    = reporter if reporter is not None else NullReporter()
        self.pot         = Hand('pot')
        self.roles       = {
            Role.offence: PlayerId.player,
            Role.defence: PlayerId.computer,
        }
        self.depth       = 0
        self.turns       = 0
        self.finished    = False
        self.total_cards = self._count_cards()

    @classmethod
    def from_cards(
            cls,
            player_cards   : Sequence[Card],
            computer_cards : Sequence[Card],
            reporter       : Optional[Reporter] = None,
    ) -> 'Game':
        return cls(
            reporter = reporter,
            dealt    = {
                PlayerId.player   : list(player_cards),
                PlayerId.computer : list(computer_cards),
            },
        )

    def __repr__(self) -> str:
        return (
            f'{self.hands[PlayerId.player]}\n'
            f'{self.hands[PlayerId.computer]}\n'
            f'{self.pot}'
        )

    @property
    def offence(self) -> PlayerId:
        return self.roles[Role.offence]

    @property
    def defence(self) -> PlayerId:
        return self.roles[Role.defence]

    @property
    def counts(self) -> Dict[PlayerId, int]:
        return {
            player_id: len(hand)
            for player_id, hand in self.hands.items()
        }

    @property
    def is_over(self) -> bool:
        return any(len(hand) == 0 for hand in self.hands.values())

    @property
    def status(self) -> GameStatus:
        if self.depth > 0:
            return GameStatus.showdown
        if self.is_over:
            return GameStatus.over

        return GameStatus.playing

    @property
    def winner(self) -> Optional[PlayerId]:
        if not self.is_over:
            return None
        if len(self.hands[PlayerId.computer]) == 0:
            return PlayerId.player

        return PlayerId.computer

    def _count_cards(self) -> int:
        return sum(len(hand) for hand in self.hands.values()) + len(self.pot)

    def check_invariants(self):
        total = self._count_cards()
        if total != self.total_cards:
            raise InvariantViolation(
                f'{total} cards in play, expected {self.total_cards}'
            )

    def begin(self):
        self.reporter.report(GameStarted(
            offence        = self.offence,
            defence        = self.defence,
            player_count   = len(self.hands[PlayerId.player]),
            computer_count = len(self.hands[PlayerId.computer]),
        ))

    def play_turn(self) -> Optional[PlayerId]:
        """
        Play one turn and return the winner once the game is over.

        The terminal condition is only checked here, at the top of a turn.
        """
        if self.finished:
            raise GameFinished('The game is over.')

        if self.is_over:
            self.finished = True
            winner        = cast(PlayerId, self.winner)
            log.debug('Game over after %d turns, %s wins', self.turns, winner.name)
            self.reporter.report(GameEnded(
                winner         = winner,
                player_cards   = tuple(self.hands[PlayerId.player]),
                computer_cards = tuple(self.hands[PlayerId.computer]),
                turns          = self.turns,
            ))
            return winner

        self.turns += 1
        self.reporter.report(TurnStarted(turn=self.turns, offence=self.offence))

        # Cannot be empty here, the terminal check above guarantees it
        card = self.hands[self.offence].pop_front()
        self._play_to_pot(self.offence, card)
        log.debug('Turn %d: %s plays %r', self.turns, self.offence.name, card)

        if card.is_face_card:
            self._showdown()

        self._change_roles()
        self.check_invariants()

        return None

    def _play_to_pot(self, player_id: PlayerId, card: Card):
        self.pot.push_back(card)
        self.reporter.report(CardPlayed(
            player = player_id,
            card   = card,
            pot    = tuple(self.pot),
            depth  = self.depth,
        ))

    def _change_roles(self):
        self.roles = {
            Role.offence: self.defence,
            Role.defence: self.offence,
        }
        self.reporter.report(RolesChanged(
            offence        = self.offence,
            defence        = self.defence,
            player_count   = len(self.hands[PlayerId.player]),
            computer_count = len(self.hands[PlayerId.computer]),
        ))

    def _open_showdown(self) -> ShowdownFrame:
        self.depth += 1
        trigger     = cast(Card, self.pot.top_card)
        frame       = ShowdownFrame(
            chances = showdown_chances(trigger),
            offence = self.offence,
            defence = self.defence,
            depth   = self.depth,
        )
        log.debug(
            'Showdown on %r: %d chance(s) for %s, depth %d',
            trigger, frame.chances, frame.defence.name, frame.depth
        )
        self.reporter.report(ShowdownStarted(
            defence = frame.defence,
            chances = frame.chances,
            depth   = frame.depth,
        ))

        return frame

    def _close_showdown(self, frame: ShowdownFrame, reason: ShowdownOutcome):
        self.reporter.report(ShowdownEnded(
            reason  = reason,
            defence = frame.defence,
            depth   = frame.depth,
        ))
        if len(self.pot) > 0:
            self._award_pot(self.offence)
        self.depth -= 1

    def _award_pot(self, winner: PlayerId):
        cards = self.pot.clear()
        self.hands[winner].push_front(cards)
        log.debug('%s wins %d card(s) from the pot', winner.name, len(cards))
        self.reporter.report(PotAwarded(
            winner         = winner,
            cards          = tuple(cards),
            player_count   = len(self.hands[PlayerId.player]),
            computer_count = len(self.hands[PlayerId.computer]),
        ))

    def _showdown(self):
        """
        Resolve the showdown triggered by the card on top of the pot.

        Each face card the defence plays swaps the roles and pushes a new
        frame. Frames below the top are never resumed: once the top frame
        resolves, the ones beneath it only unwind.
        """
        frames = [self._open_showdown()]

        while True:
            frame = frames[-1]
            if frame.used == frame.chances:
                outcome = ShowdownOutcome.chances_exhausted
                break

            frame.used += 1
            self.reporter.report(ShowdownChance(
                defence = frame.defence,
                chance  = frame.used,
                depth   = frame.depth,
            ))

            try:
                card = self.hands[frame.defence].pop_front()
            except EmptyHand:
                outcome = ShowdownOutcome.defence_out_of_cards
                break

            self._play_to_pot(frame.defence, card)

            if card.is_face_card:
                self._change_roles()
                frames.append(self._open_showdown())

        self._close_showdown(frames.pop(), outcome)

        while frames:
            self._close_showdown(frames.pop(), ShowdownOutcome.resolved_deeper)


class GameLoop():
    def __init__(
            self,
            game      : Optional[Game] = None,
            reporter  : Optional[Reporter] = None,
            max_turns : Optional[int] = None,
            rng       : Optional[random.Random] = None,
    ):
        if game is None:
            self.game = Game(rng=rng, reporter=reporter)
        else:
            self.game = game
            if reporter is not None:
                self.game.reporter = reporter
        self.max_turns = max_turns

    def run(self) -> PlayerId:
        self.game.begin()

        while True:
            if self.max_turns is not None and \
               self.game.turns >= self.max_turns and \
               not self.game.is_over:
                raise TurnLimitReached(
                    f'No winner after {self.game.turns} turns.'
                )

            winner = self.game.play_turn()
            if winner is not None:
                return winner
