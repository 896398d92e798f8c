"""
Command-line interface for importing Lexin XML dictionaries into SQLite.
"""
from __future__ import annotations

import argparse
import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional

from . import __version__
from .config import Config, load_config
from .db import DEFAULT_DB_PATH, count_dictionary_entries, open_database
from .exceptions import ConfigError, DatabaseError, DataImportError, LoadError
from .loader import store_dictionary
from .parser import parse_xml_file

logger = logging.getLogger(__name__)


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the lexin-sqlite CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose)

    try:
        config = load_config(
            file=args.file,
            db=args.db,
            target=args.target,
            config_file=args.config,
        )
    except ConfigError as e:
        logger.error(f"Error loading configuration: {e}")
        return 1

    return run(config)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lexin-sqlite",
        description="Import a Lexin XML dictionary into a SQLite database",
        epilog=(
            "examples:\n"
            "  %(prog)s --file swedish-english.xml --target english\n"
            "  %(prog)s --file swedish-arabic.xml --target arabic --db custom.db"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s version {__version__}",
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        help="Path to the XML dictionary file",
    )
    parser.add_argument(
        "--db",
        type=str,
        help=f"Path to the SQLite database file (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--target", "-t",
        type=str,
        help="Target language code expected in the XML file",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with default values for file, db and target",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr with timestamps."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        force=True,
    )


def run(config: Config) -> int:
    """Open the store, import the configured file, and report the result."""
    try:
        conn = open_database(config.db_path)
    except DatabaseError as e:
        logger.error(f"Error opening database: {e}")
        return 1

    try:
        return _import(conn, config)
    finally:
        conn.close()


def _import(conn: sqlite3.Connection, config: Config) -> int:
    start = time.monotonic()
    logger.info(f"Parsing XML file: {config.xml_file}")
    try:
        dictionary = parse_xml_file(config.xml_file)
    except DataImportError as e:
        logger.error(f"Error parsing XML file: {e}")
        return 1
    logger.info(
        f"Parsed {len(dictionary.words)} words in {time.monotonic() - start:.2f}s"
    )

    if dictionary.target_lang != config.target_lang:
        logger.warning(
            f"XML file has target language {dictionary.target_lang!r}, "
            f"but you specified {config.target_lang!r}"
        )

    logger.info(f"Storing data in SQLite database: {config.db_path}")
    start = time.monotonic()
    try:
        result = store_dictionary(conn, dictionary)
    except LoadError as e:
        logger.error(f"Error storing dictionary: {e}")
        return 1

    try:
        entry_count = count_dictionary_entries(conn, result.dictionary_id)
    except sqlite3.Error as e:
        logger.warning(f"Error counting entries: {e}")
        entry_count = len(dictionary.words)

    logger.info(
        f"Successfully imported {entry_count} entries in "
        f"{time.monotonic() - start:.2f}s"
    )
    logger.info(
        f"Dictionary from {dictionary.base_lang} to {dictionary.target_lang} "
        f"is now available in {config.db_path}"
    )
    return 0
