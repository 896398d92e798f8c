"""Import Lexin bilingual XML dictionaries into a normalized SQLite schema."""

__version__ = "0.1.0"

from .db import (
    connect as connect,
    init_db as init_db,
    open_database as open_database,
)
from .exceptions import (
    ConfigError as ConfigError,
    DatabaseError as DatabaseError,
    DataImportError as DataImportError,
    ImportCancelledError as ImportCancelledError,
    LexinError as LexinError,
    LoadError as LoadError,
)
from .loader import store_dictionary as store_dictionary
from .models import (
    BaseSense as BaseSense,
    BaseSenseOwner as BaseSenseOwner,
    Dictionary as Dictionary,
    LoadResult as LoadResult,
    TargetSense as TargetSense,
    TargetSenseOwner as TargetSenseOwner,
    Word as Word,
)
from .parser import (
    parse_xml as parse_xml,
    parse_xml_file as parse_xml_file,
)

__all__ = [
    # Store
    "connect",
    "init_db",
    "open_database",
    # Pipeline
    "parse_xml",
    "parse_xml_file",
    "store_dictionary",
    # Models
    "Dictionary",
    "Word",
    "BaseSense",
    "TargetSense",
    "BaseSenseOwner",
    "TargetSenseOwner",
    "LoadResult",
    # Exceptions
    "LexinError",
    "ConfigError",
    "DatabaseError",
    "DataImportError",
    "LoadError",
    "ImportCancelledError",
]
