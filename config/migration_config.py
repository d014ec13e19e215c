#!/usr/bin/env python3
"""
Migration configuration
Reads run settings from environment variables (and an optional .env file)
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.errors import ConfigError
from core.identifiers import mask_credentials

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = './source.sqlite'
DEFAULT_SCHEMA = 'public'
DEFAULT_BATCH_SIZE = 5000

def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')

def parse_table_list(value: Optional[str]) -> List[str]:
    """Comma separated table names; blanks dropped"""
    if not value:
        return []
    return [name.strip() for name in value.split(',') if name.strip()]

@dataclass
class MigrationConfig:
    """Settings for one migration run. Unset fields are filled from the environment."""

    sqlite_path: str = None
    pg_uri: str = None
    schema: str = None
    batch_size: int = None

    include_tables: List[str] = None
    exclude_tables: List[str] = None

    add_foreign_keys: bool = None
    empty_string_as_null: bool = None
    debug_on_error: bool = None
    reset_sequences: bool = None
    dry_run: bool = False

    log_level: str = None

    def __post_init__(self):
        if self.sqlite_path is None:
            self.sqlite_path = os.environ.get('SQLITE_PATH', DEFAULT_SQLITE_PATH)
        if self.pg_uri is None:
            self.pg_uri = os.environ.get('PG_URI')
        if self.schema is None:
            self.schema = os.environ.get('PG_SCHEMA', DEFAULT_SCHEMA)
        if self.batch_size is None:
            raw = os.environ.get('BATCH_SIZE', str(DEFAULT_BATCH_SIZE))
            try:
                self.batch_size = int(raw)
            except ValueError:
                raise ConfigError(f"BATCH_SIZE must be an integer, got {raw!r}", {'BATCH_SIZE': raw})

        if self.include_tables is None:
            self.include_tables = parse_table_list(os.environ.get('INCLUDE_TABLES'))
        if self.exclude_tables is None:
            self.exclude_tables = parse_table_list(os.environ.get('EXCLUDE_TABLES'))

        if self.add_foreign_keys is None:
            self.add_foreign_keys = _env_flag('ADD_FOREIGN_KEYS', False)
        if self.empty_string_as_null is None:
            self.empty_string_as_null = _env_flag('TREAT_EMPTY_STRING_AS_NULL', True)
        if self.debug_on_error is None:
            self.debug_on_error = _env_flag('DEBUG_ON_ERROR', False)
        if self.reset_sequences is None:
            self.reset_sequences = _env_flag('RESET_SEQUENCES', True)

        if self.log_level is None:
            self.log_level = os.environ.get('LOG_LEVEL', 'INFO')
        self.log_level = self.log_level.upper()

    def validate(self):
        """Raise ConfigError if the run cannot start"""
        if self.batch_size <= 0:
            raise ConfigError(f"Batch size must be positive, got {self.batch_size}",
                              {'batch_size': self.batch_size})
        if not self.schema:
            raise ConfigError("Destination schema must not be empty")
        if not self.sqlite_path:
            raise ConfigError("SQLite source path is required (SQLITE_PATH or --sqlite-path)")
        if not self.dry_run and not self.pg_uri:
            raise ConfigError("PostgreSQL connection URI is required (PG_URI or --pg-uri)")
        overlap = sorted(set(self.include_tables) & set(self.exclude_tables))
        if overlap:
            logger.warning(f"Tables both included and excluded (exclusion wins): {', '.join(overlap)}")

    def get_safe_dict(self) -> Dict[str, Any]:
        """Configuration as a dict with the destination password masked"""
        return {
            'sqlite_path': self.sqlite_path,
            'pg_uri': mask_credentials(self.pg_uri) if self.pg_uri else None,
            'schema': self.schema,
            'batch_size': self.batch_size,
            'include_tables': list(self.include_tables),
            'exclude_tables': list(self.exclude_tables),
            'add_foreign_keys': self.add_foreign_keys,
            'empty_string_as_null': self.empty_string_as_null,
            'debug_on_error': self.debug_on_error,
            'reset_sequences': self.reset_sequences,
            'dry_run': self.dry_run,
            'log_level': self.log_level,
        }

def load_env_file(env_file: Path) -> int:
    """Load KEY=VALUE lines into os.environ.

    Keys already exported take precedence over the file. Returns the number
    of variables set.
    """
    loaded = 0
    try:
        with open(env_file, 'r') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue
                key, value = line.split('=', 1)
                key = key.strip()
                if key.startswith('export '):
                    key = key[len('export '):].strip()
                value = value.strip()
                if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                    value = value[1:-1]
                if key and key not in os.environ:
                    os.environ[key] = value
                    loaded += 1
    except OSError as e:
        logger.warning(f"Could not load .env file {env_file}: {e}")
    return loaded

def load_config(env_file: Optional[str] = '.env', **overrides) -> MigrationConfig:
    """
    Build the run configuration.

    Priority (highest to lowest):
    1. Explicit overrides (command-line flags); None means "not given"
    2. Exported environment variables
    3. The .env file
    4. Built-in defaults
    """
    if env_file:
        path = Path(env_file)
        if path.is_file():
            count = load_env_file(path)
            logger.debug(f"Loaded {count} variable(s) from {path}")

    return MigrationConfig(**{key: value for key, value in overrides.items() if value is not None})
