# config_scout_cli.py
# -*- coding: utf-8 -*-
"""Command-line front end: find the settings of one installed program."""

import sys
import logging
import argparse

from colorama import Fore, Style, init

import config
import settings_manager
from models import SoftwareRecord
from profile_cache import ProfileCache
from settings_discovery import DiscoveryOptions, DiscoveryOrchestrator, STRICTNESS_BROAD, STRICTNESS_PRECISE
from utils import format_file_size, shorten_path


# --- Coloured print helpers ---

def print_title(text):
    """Prints a title in bright red."""
    print(f"{Style.BRIGHT}{Fore.RED}=== {text.upper()} ===")


def print_header(text):
    """Prints a section header in bright magenta."""
    print(f"\n{Style.BRIGHT}{Fore.MAGENTA}--- {text} ---{Style.RESET_ALL}")


def print_info(text):
    print(text)


def print_progress(text):
    print(f"{Fore.LIGHTBLACK_EX}  {text}{Style.RESET_ALL}")


def print_success(text):
    """Prints a success message in green."""
    print(f"{Fore.GREEN}{text}")


def print_warning(text):
    """Prints a warning message in yellow."""
    print(f"{Fore.YELLOW}WARNING: {text}")


def print_error(text):
    """Prints an error message in bright red."""
    print(f"{Style.BRIGHT}{Fore.RED}ERROR: {text}")


def setup_logging(verbose=False):
    log_level = logging.DEBUG if verbose else logging.WARNING
    log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s', '%H:%M:%S')
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers (e.g. when embedded)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="config_scout_cli",
        description=f'{config.APP_NAME}: locate the configuration files of an installed program.')
    parser.add_argument("name", nargs="?", help="Display name of the program (e.g. \"Visual Studio Code\").")
    parser.add_argument("--publisher", default="", help="Publisher name as shown by the installer.")
    parser.add_argument("--install-path", default="", help="Installation folder of the program.")
    parser.add_argument("--category", default="", help="Category hint (game, browser, ide, ...).")
    parser.add_argument("--strictness", choices=[STRICTNESS_BROAD, STRICTNESS_PRECISE],
                        help="Override the strictness from settings.json.")
    parser.add_argument("--max-results", type=int, help="Maximum number of results to show.")
    parser.add_argument("--no-fuzzy", action="store_true", help="Disable the fuzzy folder fallback.")
    parser.add_argument("--no-registry", action="store_true", help="Do not look at the Windows registry.")
    parser.add_argument("--no-cache", action="store_true", help="Ignore and don't update the profile cache.")
    parser.add_argument("--clear-cache", action="store_true", help="Forget learned profiles and exit.")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging.")
    return parser


def options_from_args(args, settings):
    settings = dict(settings)
    if args.strictness:
        settings["strictness"] = args.strictness
    if args.max_results is not None:
        settings["max_results"] = args.max_results
    if args.no_fuzzy:
        settings["fuzzy_fallback_enabled"] = False
    if args.no_registry:
        settings["registry_scan_enabled"] = False
    if args.no_cache:
        settings["profile_cache_enabled"] = False
    return DiscoveryOptions.from_settings(settings)


def print_results(result, install_dir=None):
    if not result.candidates:
        print_warning(f"No settings found for '{result.software.name}'.")
        return
    if result.matched_profile:
        print_info(f"Known profile: {Style.BRIGHT}{result.matched_profile}{Style.RESET_ALL}")
    print_header(f"{len(result)} location(s), best first")
    for rank, candidate in enumerate(result.candidates, start=1):
        size = format_file_size(candidate.size_bytes)
        print(f"  {Style.BRIGHT}{Fore.CYAN}{rank:>2}{Style.RESET_ALL}. "
              f"[{candidate.score:>3}] {candidate.artifact_kind.value:<13} {size:>9}  "
              f"{shorten_path(candidate.path, install_dir)}")


def main(argv=None):
    init(autoreset=True)
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.max_results is not None and args.max_results < 1:
        parser.error("--max-results must be a positive integer")

    cache = None
    settings, _first_launch = settings_manager.load_settings()
    options = options_from_args(args, settings)
    if options.use_cached_profiles or args.clear_cache:
        cache = ProfileCache()

    if args.clear_cache:
        if cache.clear():
            print_success("Learned profiles removed.")
            return 0
        print_error("Unable to clear the profile cache.")
        return 1

    if not args.name:
        parser.error("the program name is required")

    print_title(config.APP_NAME)
    software = SoftwareRecord(name=args.name, publisher=args.publisher,
                              install_path=args.install_path, category=args.category)
    orchestrator = DiscoveryOrchestrator(options=options, profile_cache=cache, progress_callback=print_progress)
    try:
        result = orchestrator.discover(software)
    except KeyboardInterrupt:
        print_error("Interrupted.")
        return 1

    print_results(result, args.install_path or None)
    return 0 if result.candidates else 1


if __name__ == "__main__":
    sys.exit(main())
