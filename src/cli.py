import argparse
import config

EXAMPLES = """
Examples:
  town-router --map data/maps/five_towns.map --ticks 20 --debug
  town-router --map data/maps/five_towns.map --tps 2 --image --check
"""

LOG_COLORS = {
    "info": "\033[94m",
    "warning": "\033[93m",
    "error": "\033[91m",
}
RESET = "\033[0m"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a shortest-path routing simulation over a town map.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=EXAMPLES,
    )
    parser.add_argument("--map", type=str, required=True,
                        help="Path to the .map file defining the town, cars and events.")
    parser.add_argument("--ticks", type=int, default=config.DEFAULT_MAX_TICKS,
                        help=f"Maximum number of ticks to simulate (default: {config.DEFAULT_MAX_TICKS}).")
    parser.add_argument("--tps", type=float, default=0.0,
                        help="Ticks per second, 0 runs as fast as possible (default: 0).")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the car spawners.")
    parser.add_argument("--image", action="store_true",
                        help=f"Save a picture of the town to {config.RESULTS_DIR}.")
    parser.add_argument("--debug", action="store_true",
                        help="Print routing decisions and reroutes (implies --check).")
    parser.add_argument("--check", action="store_true",
                        help="Verify car and road bookkeeping after every mutation.")
    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parses the command line and applies the global flags it sets.

    Args:
        argv: Argument list, defaults to sys.argv.

    Returns:
        The parsed arguments: map, ticks, tps, seed, image, debug, check.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.tps < 0:
        parser.error("--tps must not be negative.")
    if args.ticks <= 0:
        parser.error("--ticks must be a positive number.")

    config.DEBUG = args.debug
    config.CHECK_CONSISTENCY = args.check or args.debug
    return args


def debug_log(message: str, level: str = "info"):
    """
    Prints a message to the console if debug mode is enabled.

    Args:
        message (str): The message to log.
        level (str): 'info', 'warning' or 'error'. Selects the color.
    """
    if not config.DEBUG:
        return
    color = LOG_COLORS.get(level.lower())
    if color:
        print(f"{color}[DEBUG] {message}{RESET}")
    else:
        print(f"[DEBUG] {message}")
