import argparse
import os
import random
import sys
from typing import Callable, List, Optional, TextIO

from src.common.logging_utils import setup_logging, get_logger, LOG_LEVEL
from src.engine.cards import describe_card
from src.engine.events import (
    Event, Reporter, NullReporter, LoggingReporter, MultiReporter, ShowdownOutcome,
    GameStarted, TurnStarted, CardPlayed, RolesChanged,
    ShowdownStarted, ShowdownChance, ShowdownEnded, PotAwarded, GameEnded,
)
from src.engine.game import GameLoop, PlayerId, TurnLimitReached


log = get_logger('console.app')

# Wait for ENTER between steps unless told otherwise on the command line
INTERACTIVE_MODE = os.getenv('BTN_INTERACTIVE', '0') == '1'

PROMPT = 'Press ENTER to continue...'


def player_title(player_id: PlayerId) -> str:
    return player_id.name.capitalize()


class ConsoleReporter(Reporter):
    """Narrates the game as plain text, optionally pausing for ENTER."""

    def __init__(
            self,
            interactive : bool = False,
            out         : Optional[TextIO] = None,
            input_fn    : Callable[[], str] = input,
    ):
        self.interactive = interactive
        self.out         = out if out is not None else sys.stdout
        self.input_fn    = input_fn

    def _print(self, *lines: str):
        for line in lines:
            print(line, file=self.out)

    def _report_card_count(self, player_count: int, computer_count: int):
        self._print(
            f'Player has {player_count} cards.',
            f'Computer has {computer_count} cards.\n',
        )

    def _describe_cards(self, label: str, cards):
        self._print(f'\n--- The {label} hand has {len(cards)} card(s). They are...')
        self._print(*[describe_card(card) for card in cards])
        self._print('---')

    def wait_for_user_input(self):
        if self.interactive:
            print(PROMPT, end='', file=self.out)
            self.out.flush()
            self.input_fn()

    def report(self, event: Event):
        if isinstance(event, GameStarted):
            self._print('==========', 'Game start', '==========\n')
            self._report_card_count(event.player_count, event.computer_count)
            self._print(
                f'Offence: {player_title(event.offence)}',
                f'Defence: {player_title(event.defence)}\n',
            )

        elif isinstance(event, TurnStarted):
            self.wait_for_user_input()

        elif isinstance(event, CardPlayed):
            self._describe_cards('pot', event.pot)
            # Only the defence plays while a showdown is open
            if event.depth > 0:
                self.wait_for_user_input()

        elif isinstance(event, RolesChanged):
            self._print(
                '\nChanging roles...',
                f'\nOffence: {player_title(event.offence)}',
                f'Defence: {player_title(event.defence)}\n',
            )
            self._report_card_count(event.player_count, event.computer_count)

        elif isinstance(event, ShowdownStarted):
            self._print(
                f'Showdown... with {event.chances} chance(s) for the '
                f'{event.defence.name} on defence, recursion level is {event.depth}\n'
            )
            self.wait_for_user_input()

        elif isinstance(event, ShowdownChance):
            self._print(f'Chance {event.chance} for {event.defence.name}...')

        elif isinstance(event, ShowdownEnded):
            if event.reason == ShowdownOutcome.defence_out_of_cards:
                self._print(
                    f'\nShowdown ended prematurely with {event.defence.name} running '
                    f'out of cards at recursion level {event.depth}.\n'
                )
            elif event.reason == ShowdownOutcome.chances_exhausted:
                self._print(
                    f'\nShowdown ended when {event.defence.name} on defence ran '
                    f'out of chances at recursion level {event.depth}.\n'
                )
            else:
                self._print(
                    f'Recursion level is {event.depth}; showdown ended at a '
                    'higher recursion level.',
                    'No cards change hands.\n',
                )

        elif isinstance(event, PotAwarded):
            # Only the winner's count changed, by the size of the pot
            won = len(event.cards)
            if event.winner == PlayerId.player:
                self._report_card_count(event.player_count - won, event.computer_count)
            else:
                self._report_card_count(event.player_count, event.computer_count - won)
            self._print(
                f'{player_title(event.winner)} on offence will get '
                f'{won} cards from the pot.\n'
            )
            self._report_card_count(event.player_count, event.computer_count)

        elif isinstance(event, GameEnded):
            self._print('=== GAME OVER ===')
            self._describe_cards(PlayerId.player.name, event.player_cards)
            self._describe_cards(PlayerId.computer.name, event.computer_cards)
            self._print(f'The {event.winner.name} wins.')


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Simulate a game of Beggar Thy Neighbour.'
    )
    parser.add_argument(
        '--interactive',
        action='store_true',
        default=INTERACTIVE_MODE,
        help='Wait for ENTER between steps.',
    )
    parser.add_argument(
        '--no-interactive',
        dest='interactive',
        action='store_false',
        default=INTERACTIVE_MODE,
        help='Never wait for ENTER, even with BTN_INTERACTIVE=1.',
    )
    parser.add_argument(
        '--seed', type=int, default=None, help='Seed for the shuffle.'
    )
    parser.add_argument(
        '--max-turns',
        type=int,
        default=None,
        help='Stop the game after this many turns.',
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Only print the winner.',
    )
    parser.add_argument(
        '--log-events',
        action='store_true',
        help='Also write every game event to the log.',
    )
    parser.add_argument(
        '--log-level', default=LOG_LEVEL, help='DEBUG, INFO, WARNING or ERROR.'
    )

    return parser.parse_args(argv)


def build_reporter(args: argparse.Namespace) -> Reporter:
    reporters: List[Reporter] = []
    if not args.quiet:
        reporters.append(ConsoleReporter(interactive=args.interactive))
    if args.log_events:
        reporters.append(LoggingReporter())

    if len(reporters) == 0:
        return NullReporter()
    if len(reporters) == 1:
        return reporters[0]

    return MultiReporter(reporters)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    rng  = random.Random(args.seed)
    loop = GameLoop(
        reporter  = build_reporter(args),
        max_turns = args.max_turns,
        rng       = rng,
    )

    try:
        winner = loop.run()
    except TurnLimitReached as e:
        log.warning('Game stopped: %s', e)
        return 1

    log.info('%s wins after %d turns', winner.name, loop.game.turns)
    if args.quiet:
        print(f'The {winner.name} wins.')

    return 0
