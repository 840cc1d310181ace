#!/usr/bin/env python3
"""
GameShelf - a console catalog for your personal game collection.
Add, remove and list games, and find the cheapest or most expensive one.
"""

import argparse
import enum
import json
import logging
import os
import sys
from typing import Dict, Optional

from colorama import Cursor, Fore, Style, ansi, init
from dotenv import load_dotenv

from shelf.audio import MUSIC_FILE, CuePlayer, MusicSession, NullCuePlayer
from shelf.errors import ConfigError, StorageError
from shelf.repositories import CatalogRepository
from shelf.services import (
    CatalogService,
    LegacyXmlService,
    OperationResult,
    STATUS_EMPTY_CATALOG,
    STATUS_INVALID_INPUT,
    STATUS_NOT_FOUND,
)

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

LOG_FORMAT = '[%(levelname)s] %(name)s: %(message)s'


def setup_logging(level='WARNING') -> logging.Logger:
    """Send the ``gameshelf`` logger tree to stderr.

    Every part of the package logs under a child of ``gameshelf``
    (``.cli``, ``.catalog``, ``.legacy``, ``.audio``, ``.repository.*``), so a
    single handler here covers all of them.  Calling this again only changes
    the level, which is how ``--log-level`` and ``log_level`` take effect
    after the module-level call below.

    *level* is a name (case-insensitive) or a ``logging`` constant; an
    unrecognised name means WARNING.
    """
    if isinstance(level, int):
        numeric = level
    else:
        # getLevelName maps a known name to its number and anything else to a str
        numeric = logging.getLevelName(str(level).strip().upper())
        if not isinstance(numeric, int):
            numeric = logging.WARNING
    logger = logging.getLogger('gameshelf')
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = setup_logging()

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: Dict = {
    'database_path': 'games.json',
    'log_level': 'WARNING',
    'sound_enabled': True,
    'sounds_dir': 'sounds',
    'music_volume': 0.5,
    'effects_volume': 1.0,
    'pause_after_command': True,
    'clear_screen': True,
}

_FALSE_VALUES = {'0', 'false', 'no', 'off'}
_VOLUME_KEYS = ('music_volume', 'effects_volume')


def load_config(config_path: str = 'config.json', required: bool = False) -> Dict:
    """Load configuration from a JSON file with environment variable support.

    Missing keys fall back to :data:`DEFAULT_CONFIG`.  Environment variables
    take precedence over config file values:

    - GAMESHELF_DB overrides database_path
    - GAMESHELF_LOG_LEVEL overrides log_level
    - GAMESHELF_SOUND overrides sound_enabled ("0", "false", "no", "off" disable)
    - GAMESHELF_SOUNDS_DIR overrides sounds_dir

    Args:
        config_path: Path of the JSON config file.
        required: If ``True`` a missing file is an error; otherwise the
            defaults are used.

    Raises:
        ConfigError: The file is required but missing, unreadable, not valid
            JSON, or not a JSON object, or a volume is not a number.
    """
    config = dict(DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
        except ValueError as e:
            # JSONDecodeError or UnicodeDecodeError
            raise ConfigError(f"Error parsing config file '{config_path}': {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not read config file '{config_path}': {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file '{config_path}' must contain a JSON object")
        for key, value in file_config.items():
            if key not in DEFAULT_CONFIG:
                logger.warning("Ignoring unknown config key %r in %s", key, config_path)
                continue
            config[key] = value
    elif required:
        raise ConfigError(f"Config file '{config_path}' not found")

    if os.getenv('GAMESHELF_DB'):
        config['database_path'] = os.getenv('GAMESHELF_DB')
    if os.getenv('GAMESHELF_LOG_LEVEL'):
        config['log_level'] = os.getenv('GAMESHELF_LOG_LEVEL')
    if os.getenv('GAMESHELF_SOUND'):
        config['sound_enabled'] = os.getenv('GAMESHELF_SOUND').strip().lower() not in _FALSE_VALUES
    if os.getenv('GAMESHELF_SOUNDS_DIR'):
        config['sounds_dir'] = os.getenv('GAMESHELF_SOUNDS_DIR')

    for key in _VOLUME_KEYS:
        value = config[key]
        # bool is an int subclass; true/false is not a volume
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Config key '{key}' must be a number, got {value!r}")
        try:
            config[key] = float(value)
        except OverflowError as e:
            raise ConfigError(f"Config key '{key}' is out of range") from e

    return config


def format_price(price: float) -> str:
    return f"{price:.2f}"


class MenuCommand(enum.IntEnum):
    """Main-menu entries, numbered as shown to the user."""

    ADD = 1
    REMOVE = 2
    LIST = 3
    MOST_EXPENSIVE = 4
    CHEAPEST = 5
    EXIT = 6


MENU_LABELS = {
    MenuCommand.ADD: 'Add game',
    MenuCommand.REMOVE: 'Remove game',
    MenuCommand.LIST: 'All games',
    MenuCommand.MOST_EXPENSIVE: 'Most expensive game',
    MenuCommand.CHEAPEST: 'Cheapest game',
    MenuCommand.EXIT: 'Exit',
}


class GameShelf:
    """Console front end for the game catalog."""

    def __init__(self, config: Optional[Dict] = None, cues=None):
        self._log = logging.getLogger('gameshelf.cli')
        self.config = dict(DEFAULT_CONFIG)
        if config:
            self.config.update(config)

        repo = CatalogRepository(self.config['database_path'])
        self.catalog = CatalogService(repo)
        self.legacy = LegacyXmlService(repo)

        if cues is not None:
            self.cues = cues
        elif self.config['sound_enabled']:
            self.cues = CuePlayer(self.config['sounds_dir'])
        else:
            self.cues = NullCuePlayer()

        self._handlers = {
            MenuCommand.ADD: self.add_game,
            MenuCommand.REMOVE: self.remove_game,
            MenuCommand.LIST: self.display_games,
            MenuCommand.MOST_EXPENSIVE: self.display_most_expensive,
            MenuCommand.CHEAPEST: self.display_cheapest,
        }

    # ------------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------------

    def cue(self, name: str) -> None:
        self.cues.play(name, self.config['effects_volume'])

    def clear(self) -> None:
        if self.config['clear_screen']:
            print(ansi.clear_screen() + Cursor.POS(1, 1), end='')

    def pause(self) -> None:
        if self.config['pause_after_command']:
            input(f"\n{Fore.WHITE}Press Enter to go back...\n")

    def error(self, message: str) -> None:
        print(f"{Fore.RED}{message}")
        self.cue('error')

    def show_menu(self) -> None:
        print(f"\n{Fore.GREEN}{Style.BRIGHT}Main Menu:\n")
        for command in MenuCommand:
            print(f"{Fore.YELLOW}{command.value}. {Fore.GREEN}{MENU_LABELS[command]}")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_game(self) -> OperationResult:
        """Prompt for a new game and add it to the catalog."""
        name = input(f"{Fore.GREEN}Enter the name of the game: {Fore.WHITE}")
        genre = input(f"{Fore.GREEN}Enter the genre of the game: {Fore.WHITE}")
        price_text = input(f"{Fore.GREEN}Enter game price: {Fore.WHITE}")
        result = self.catalog.add(name, genre, price_text)
        if result.status == STATUS_INVALID_INPUT:
            self.error("\nInvalid number format.")
        else:
            print(f"\n{Fore.GREEN}Game added successfully.")
            self.cue('success')
        return result

    def remove_game(self) -> OperationResult:
        """Prompt for a name and remove the first game with that exact name."""
        name = input(f"{Fore.GREEN}To erase, please type the name of the game: {Fore.WHITE}")
        result = self.catalog.remove(name)
        if result.status == STATUS_NOT_FOUND:
            self.error("\nSorry, game not found.")
        else:
            print(f"\n{Fore.GREEN}Game erased successfully.")
            self.cue('success')
        return result

    def display_games(self) -> int:
        """Print every stored game.  Returns the number shown."""
        shown = 0
        for record in self.catalog.iter_records():
            print(f"\n{Fore.YELLOW}Name: {Fore.WHITE}{record['name']}")
            print(f"{Fore.YELLOW}Genre: {Fore.WHITE}{record['genre']}")
            print(f"{Fore.YELLOW}Price: {Fore.WHITE}{format_price(record['price'])}")
            shown += 1
        if not shown:
            print(f"{Fore.YELLOW}No games saved yet.")
        return shown

    def display_most_expensive(self) -> OperationResult:
        return self._display_extreme(self.catalog.most_expensive(), 'Most expensive game')

    def display_cheapest(self) -> OperationResult:
        return self._display_extreme(self.catalog.cheapest(), 'Cheapest game')

    def _display_extreme(self, result: OperationResult, label: str) -> OperationResult:
        if result.status == STATUS_EMPTY_CATALOG:
            self.error("Sorry, there are no saved games.")
        else:
            print(f"{Fore.YELLOW}{label}: {Fore.WHITE}{result.record['name']}")
            print(f"{Fore.YELLOW}Price: {Fore.WHITE}{format_price(result.record['price'])}")
        return result

    def run_command(self, command: MenuCommand) -> None:
        """Run one menu command, reporting storage failures instead of raising."""
        try:
            self._handlers[command]()
        except StorageError as e:
            self._log.debug("Storage failure during %s", command.name, exc_info=True)
            self.error(f"Could not access the game catalog: {e}")

    # ------------------------------------------------------------------
    # Interactive loop
    # ------------------------------------------------------------------

    def interactive_mode(self) -> None:
        """Run the main menu until the user chooses Exit."""
        try:
            if self.catalog.initialize():
                print(f"{Fore.CYAN}Created a new game catalog at {self.catalog.path}")
        except StorageError as e:
            self.error(f"Could not create the game catalog: {e}")
            return

        with MusicSession(self.cues) as music:
            music.start(os.path.join(self.config['sounds_dir'], MUSIC_FILE),
                        self.config['music_volume'])
            while True:
                self.show_menu()
                self.cue('back')
                try:
                    raw = input(f"\n{Fore.GREEN}Choose point: {Fore.WHITE}")
                except EOFError:
                    print(f"\n{Fore.CYAN}See you next time, take care.")
                    return

                try:
                    choice = int(raw)
                except ValueError:
                    self.clear()
                    print(f"{Fore.RED}Wrong key, you must use numbers\n")
                    self.cue('message')
                    continue

                try:
                    command = MenuCommand(choice)
                except ValueError:
                    self.clear()
                    print(f"{Fore.RED}You must choose from 1 to {len(MenuCommand)}.\n")
                    self.cue('message')
                    continue

                self.cue('select')
                if command is MenuCommand.EXIT:
                    self.clear()
                    print(f"{Fore.CYAN}See you next time, take care.")
                    return

                self.clear()
                self.run_command(command)
                self.pause()


# ---------------------------------------------------------------------------
# One-shot commands
# ---------------------------------------------------------------------------

def run_once(shelf: GameShelf, args: argparse.Namespace) -> int:
    """Execute the single command requested on the command line.

    Returns:
        Process exit status: 0 on success, 1 on any reported failure.
    """
    catalog = shelf.catalog
    catalog.initialize()

    if args.list:
        shelf.display_games()
        return 0
    if args.most_expensive:
        return 0 if shelf.display_most_expensive().ok else 1
    if args.cheapest:
        return 0 if shelf.display_cheapest().ok else 1
    if args.add:
        name, genre, price_text = args.add
        result = catalog.add(name, genre, price_text)
        if not result.ok:
            print(f"{Fore.RED}Invalid number format: {price_text!r}")
            return 1
        print(f"{Fore.GREEN}Added {name} ({format_price(result.record['price'])}).")
        return 0
    if args.remove is not None:
        if not catalog.remove(args.remove).ok:
            print(f"{Fore.RED}Sorry, game not found: {args.remove}")
            return 1
        print(f"{Fore.GREEN}Removed {args.remove}.")
        return 0
    if args.import_xml:
        summary = shelf.legacy.import_from(args.import_xml)
        print(f"{Fore.GREEN}Imported {summary['imported']} games from {args.import_xml}.")
        if summary['skipped']:
            print(f"{Fore.YELLOW}Skipped {summary['skipped']} games with an invalid price.")
        return 0
    if args.export_xml:
        count = shelf.legacy.export(args.export_xml)
        print(f"{Fore.GREEN}Exported {count} games to {args.export_xml}.")
        return 0
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='GameShelf - catalog for your personal game collection',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 gameshelf.py                                # Run the interactive menu
  python3 gameshelf.py --list                         # List all games and exit
  python3 gameshelf.py --add "Go" Strategy 5.00       # Add a game and exit
  python3 gameshelf.py --cheapest                     # Show the cheapest game
  python3 gameshelf.py --import-xml games.xml         # Import an old games.xml
        """
    )

    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Path to config file (default: config.json if present)'
    )
    parser.add_argument(
        '--db',
        default=None,
        help='Path to the catalog file (overrides database_path)'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging verbosity (overrides log_level)'
    )
    parser.add_argument(
        '--no-sound',
        action='store_true',
        help='Disable sound effects and music'
    )

    once = parser.add_mutually_exclusive_group()
    once.add_argument(
        '--list', '-l',
        action='store_true',
        help='List all games and exit'
    )
    once.add_argument(
        '--most-expensive',
        action='store_true',
        help='Show the most expensive game and exit'
    )
    once.add_argument(
        '--cheapest',
        action='store_true',
        help='Show the cheapest game and exit'
    )
    once.add_argument(
        '--add',
        nargs=3,
        metavar=('NAME', 'GENRE', 'PRICE'),
        help='Add a game and exit'
    )
    once.add_argument(
        '--remove',
        metavar='NAME',
        help='Remove the first game with this exact name and exit'
    )
    once.add_argument(
        '--import-xml',
        metavar='PATH',
        help='Append the games from a legacy games.xml file and exit'
    )
    once.add_argument(
        '--export-xml',
        metavar='PATH',
        help='Write the catalog as a legacy games.xml file and exit'
    )
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    load_dotenv()

    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config or 'config.json', required=args.config is not None)
    except ConfigError as e:
        print(f"{Fore.RED}Error: {e}")
        print(f"{Fore.YELLOW}Copy 'config_template.json' to 'config.json' or omit --config to use defaults.")
        return 1

    if args.db:
        config['database_path'] = args.db
    if args.log_level:
        config['log_level'] = args.log_level
    if args.no_sound:
        config['sound_enabled'] = False
    setup_logging(config['log_level'])

    one_shot = (args.list or args.most_expensive or args.cheapest or args.add
                or args.remove is not None or args.import_xml or args.export_xml)
    if one_shot:
        # One-shot runs are silent
        config['sound_enabled'] = False
        config['clear_screen'] = False

    shelf = GameShelf(config)
    try:
        if one_shot:
            return run_once(shelf, args)
        shelf.interactive_mode()
    except StorageError as e:
        print(f"{Fore.RED}Could not access the game catalog: {e}")
        return 1
    except KeyboardInterrupt:
        print(f"\n\n{Fore.YELLOW}Interrupted by user. Goodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
