"""Command-line interface for Commander Finder."""

import argparse
import sys
import logging
import time
from typing import Optional

from . import __version__
from .color_identity import ColorIdentityResolver, ColorIdentityError, EmptyIdentity, TooManyColors, InvalidColorCode
from .config import ConfigManager, FinderConfig, apply_env_overrides
from .output_manager import OutputManager
from .scryfall_service import ScryfallService, SearchFailed
from .search_session import FinderSession
from .state import AppState, StateStore, remove_favorite, toggle_theme


def parse_arguments() -> argparse.Namespace:
    """
    Parse command-line arguments for the color identity search.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='commander-finder',
        description='Find Commander-legal commanders by color identity on Scryfall',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s blue-black
  %(prog)s "white red green" --pick-random
  %(prog)s UB --favorite "Anowon, the Ruin Thief"
  %(prog)s --random-colors --pick-random
  %(prog)s WUBRG --save --format json --output-dir ./results
  %(prog)s --list-favorites
        """
    )

    parser.add_argument(
        'colors',
        type=str,
        nargs='?',
        help='Color identity as letters (UB) or color names (blue-black)'
    )

    parser.add_argument(
        '--random-colors',
        action='store_true',
        help='Search a randomly generated color identity instead'
    )

    parser.add_argument(
        '--pick-random',
        action='store_true',
        help='Show a single random commander instead of all matches'
    )

    parser.add_argument(
        '--favorite',
        type=str,
        metavar='NAME',
        help='Save the named commander from the results to your favorites'
    )

    parser.add_argument(
        '--list-favorites',
        action='store_true',
        help='List saved favorite commanders and exit'
    )

    parser.add_argument(
        '--remove-favorite',
        type=str,
        metavar='NAME',
        help='Remove a commander from your favorites and exit'
    )

    parser.add_argument(
        '--toggle-theme',
        action='store_true',
        help='Switch between light and dark theme and exit'
    )

    parser.add_argument(
        '--save',
        action='store_true',
        help='Save the results to a file'
    )

    parser.add_argument(
        '--format',
        choices=['text', 'json'],
        default='text',
        help='File format used with --save (default: text)'
    )

    parser.add_argument(
        '--output-dir', '-o',
        type=str,
        default=None,
        help='Directory for files written with --save (default: current directory)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output with detailed progress information'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress all output except results and errors'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    args = parser.parse_args()

    standalone = args.list_favorites or args.remove_favorite or args.toggle_theme

    if args.colors and args.random_colors:
        parser.error("Give either colors or --random-colors, not both")

    if not standalone and not args.colors and not args.random_colors:
        parser.error("Colors are required unless using --random-colors or a favorites/theme option")

    if args.verbose and args.quiet:
        parser.error("--verbose and --quiet cannot be used together")

    return args


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Set up logging for debugging and user information.

    Args:
        verbose: Enable verbose logging with detailed operation reporting
        quiet: Enable quiet mode (errors only)
    """
    if quiet:
        level = logging.ERROR
        format_str = '%(levelname)s: %(message)s'
    elif verbose:
        level = logging.DEBUG
        format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    else:
        level = logging.INFO
        format_str = '%(levelname)s: %(message)s'

    class MultilineFormatter(logging.Formatter):
        def format(self, record):
            formatted = super().format(record)
            if '\n' in formatted:
                lines = formatted.split('\n')
                return '\n'.join([lines[0]] + ['  ' + line for line in lines[1:]])
            return formatted

    logging.basicConfig(
        level=level,
        format=format_str,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    for handler in logging.root.handlers:
        handler.setFormatter(MultilineFormatter(format_str, datefmt='%Y-%m-%d %H:%M:%S'))

    app_logger = logging.getLogger('commander_finder')
    app_logger.setLevel(level)

    # Reduce noise from external libraries in non-verbose mode
    if not verbose:
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('requests').setLevel(logging.WARNING)


def create_session(config: FinderConfig, state: Optional[AppState] = None) -> FinderSession:
    """Build a FinderSession wired from configuration."""
    resolver = ColorIdentityResolver(detail_url_source=config.detail_url_source)
    scryfall_service = ScryfallService(
        base_url=config.api_base_url,
        timeout=config.api_timeout_seconds,
        min_request_interval=config.min_request_interval,
        max_pages=config.max_pages,
        user_agent=config.user_agent
    )
    return FinderSession(resolver, scryfall_service, state)


def find_commanders(
    session: FinderSession,
    colors: Optional[str] = None,
    random_colors: bool = False,
    pick_random: bool = False,
    favorite: Optional[str] = None,
    save: bool = False,
    output_dir: str = ".",
    fmt: str = "text",
    quiet: bool = False
) -> AppState:
    """
    Run one search and print the results.

    Args:
        session: Search session holding the current user state
        colors: User-entered color identity
        random_colors: Search a random color identity instead of colors
        pick_random: Show a single random match
        favorite: Name of a result to add to favorites
        save: Write the results to a file
        output_dir: Directory for the results file
        fmt: Results file format
        quiet: Suppress non-essential output

    Returns:
        The session's user state after the search
    """
    logger = logging.getLogger('commander_finder.cli')
    start_time = time.time()

    if random_colors:
        outcome = session.search_random_identity(pick_random=pick_random)
    else:
        outcome = session.search(colors, pick_random=pick_random)

    if outcome is None:
        logger.warning("Search was superseded by a newer one")
        return session.state

    logger.debug(f"Query '{outcome.query}' took {time.time() - start_time:.2f}s")

    output_manager = OutputManager(output_dir)
    print(output_manager.format_results(outcome.code, outcome.records, outcome.random_pick))

    # Results file first so an unknown favorite name does not lose it
    if save:
        output_path = output_manager.write_results_file(outcome.code, outcome.records, fmt=fmt)
        if not quiet:
            print(f"\nResults saved to: {output_path}")

    if favorite:
        record = session.save_favorite(outcome, favorite)
        if not quiet:
            print(f"\nSaved '{record.name}' to favorites")

    return session.state


def handle_user_friendly_errors(error: Exception, verbose: bool = False) -> str:
    """
    Convert technical errors into user-friendly error messages.

    Args:
        error: Exception to convert
        verbose: Whether to include technical details

    Returns:
        User-friendly error message
    """
    if isinstance(error, EmptyIdentity):
        return "No colors given. Enter letters like UB or names like blue-black."

    elif isinstance(error, TooManyColors):
        return f"Too many colors: {error}"

    elif isinstance(error, InvalidColorCode):
        return f"Unrecognized colors: {error}"

    elif isinstance(error, SearchFailed):
        return f"Scryfall search failed: {error}"

    elif isinstance(error, ValueError):
        return f"Invalid input: {error}"

    elif isinstance(error, OSError):
        return f"File system error: {error}"

    else:
        if verbose:
            return f"Unexpected error: {error}"
        else:
            return "An unexpected error occurred. Use --verbose for more details."


def main():
    """Main entry point for the Commander Finder CLI."""
    args = None

    try:
        args = parse_arguments()

        config_manager = ConfigManager()
        config = apply_env_overrides(config_manager.get_config())
        verbose = args.verbose or config.verbose_output

        setup_logging(verbose, args.quiet)

        store = StateStore(config_manager.get_state_path(), default_theme=config.default_theme)
        state = store.load()

        if args.list_favorites:
            print(OutputManager().format_favorites(state))
            return

        if args.remove_favorite:
            if not state.has_favorite(args.remove_favorite):
                raise ValueError(f"'{args.remove_favorite}' is not in your favorites")
            store.save(remove_favorite(state, args.remove_favorite))
            if not args.quiet:
                print(f"Removed '{args.remove_favorite}' from favorites")
            return

        if args.toggle_theme:
            state = toggle_theme(state)
            store.save(state)
            if not args.quiet:
                print(f"Theme is now {state.theme}")
            return

        if not args.quiet:
            print(f"Commander Finder v{__version__}")
            print("=" * 40)

        session = create_session(config, state)
        try:
            new_state = find_commanders(
                session,
                colors=args.colors,
                random_colors=args.random_colors,
                pick_random=args.pick_random,
                favorite=args.favorite,
                save=args.save,
                output_dir=args.output_dir or config.default_output_dir,
                fmt=args.format,
                quiet=args.quiet
            )
        finally:
            session.scryfall_service.close()

        if new_state != state:
            store.save(new_state)

    except KeyboardInterrupt:
        if not (args and args.quiet):
            print("\nOperation cancelled by user")
        sys.exit(1)

    except (ColorIdentityError, SearchFailed, ValueError) as e:
        # User-facing errors - show friendly message
        print(f"Error: {handle_user_friendly_errors(e, args.verbose if args else False)}")
        sys.exit(1)

    except Exception as e:
        error_msg = handle_user_friendly_errors(e, args.verbose if args else False)

        if args and args.verbose:
            logging.error(f"Unexpected error: {e}")
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {error_msg}")

        sys.exit(1)


if __name__ == "__main__":
    main()
