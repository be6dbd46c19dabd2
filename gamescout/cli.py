#!/usr/bin/env python3
"""
gamescout-wishlist - manage the saved-games wishlist from the terminal.

Also the wiring point for other front ends: :func:`build_service` turns a
loaded configuration into a ready :class:`WishlistService`.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from colorama import Fore, Style, init

from .config import load_config, setup_logging
from .errors import ConfigError, WriteFailure
from .models import WishlistEntry, cover_url
from .repositories import (
    FileKeyValueStore, KeyValueStore, MemoryKeyValueStore, SqlKeyValueStore,
)
from .services import WishlistService

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)


def build_store(config: Dict[str, Any]) -> KeyValueStore:
    """Create the key-value medium selected by ``storage_backend``."""
    backend = config['storage_backend']
    quota = config.get('max_value_bytes')
    if backend == 'file':
        return FileKeyValueStore(config['storage_dir'], max_value_bytes=quota)
    if backend == 'sql':
        return SqlKeyValueStore(config['database_url'], max_value_bytes=quota)
    if backend == 'memory':
        return MemoryKeyValueStore(max_value_bytes=quota)
    raise ConfigError(f"Unknown storage_backend: {backend!r}")


def build_service(config: Dict[str, Any],
                  store: Optional[KeyValueStore] = None) -> WishlistService:
    """Create the wishlist service for *config* (one per application)."""
    return WishlistService(
        store if store is not None else build_store(config),
        key=config['storage_key'],
        ttl_seconds=config['cache_ttl_ms'] / 1000.0,
    )


def _print_entry(entry: WishlistEntry) -> None:
    print(f"{Fore.CYAN}{entry.id:>10}{Style.RESET_ALL}  {entry.name or '(unnamed)'}")
    extra = []
    if entry.added_at is not None:
        extra.append(f"added {entry.added_at}")
    if entry.url:
        extra.append(entry.url)
    image = cover_url(entry)
    if image:
        extra.append(image)
    for line in extra:
        print(f"{'':>12}{Style.DIM}{line}{Style.RESET_ALL}")


def _entry_from_args(args) -> WishlistEntry:
    return WishlistEntry(id=args.id, name=args.name,
                         cover_image_id=args.cover, url=args.url)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gamescout-wishlist',
        description='GameScout - manage your game wishlist',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gamescout-wishlist list
  gamescout-wishlist add 42 "Chrono Trigger" --cover co1x2y
  gamescout-wishlist toggle 42 "Chrono Trigger"
  gamescout-wishlist contains 42
        """
    )
    parser.add_argument(
        '--config', '-c',
        default='config.json',
        help='Path to config file (default: config.json)'
    )
    parser.add_argument(
        '--log-level',
        help='Override the configured log level (DEBUG, INFO, WARNING, ...)'
    )

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('list', help='Show every wishlisted game')

    for name, help_text in (('add', 'Add a game'), ('toggle', 'Add or remove a game')):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument('id', help='Catalogue id of the game')
        cmd.add_argument('name', help='Display name of the game')
        cmd.add_argument('--cover', help='Cover image id')
        cmd.add_argument('--url', help='Link to the game page')

    remove = sub.add_parser('remove', help='Remove a game')
    remove.add_argument('id', help='Catalogue id of the game')

    contains = sub.add_parser('contains', help='Exit 0 if the game is wishlisted')
    contains.add_argument('id', help='Catalogue id of the game')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"{Fore.RED}Error: {e}")
        return 1
    setup_logging(args.log_level or config['log_level'])
    service = build_service(config)

    try:
        if args.command == 'list':
            entries = service.get_all()
            if not entries:
                print(f"{Fore.YELLOW}Your wishlist is empty.")
            for entry in entries:
                _print_entry(entry)
        elif args.command == 'add':
            if service.add(_entry_from_args(args)):
                print(f"{Fore.GREEN}Added {args.name} to your wishlist")
            else:
                print(f"{Fore.YELLOW}{args.name} was not added (already wishlisted or storage unavailable)")
        elif args.command == 'remove':
            if service.remove(args.id):
                print(f"{Fore.GREEN}Removed {args.id} from your wishlist")
            else:
                print(f"{Fore.YELLOW}{args.id} is not on your wishlist")
        elif args.command == 'toggle':
            if service.toggle(_entry_from_args(args)):
                print(f"{Fore.GREEN}Added {args.name} to your wishlist")
            else:
                print(f"{Fore.YELLOW}{args.name} is not on your wishlist")
        elif args.command == 'contains':
            if service.contains(args.id):
                print(f"{Fore.GREEN}{args.id} is on your wishlist")
                return 0
            print(f"{Fore.YELLOW}{args.id} is not on your wishlist")
            return 1
    except WriteFailure as e:
        print(f"{Fore.RED}Error: {e}. Your wishlist was not changed.")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
