"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from feeledger.domain.errors import ConfigurationError

ENV_DB_PATH = "FEELEDGER_DB_PATH"
ENV_BUSY_TIMEOUT = "FEELEDGER_BUSY_TIMEOUT"
ENV_CONFLICT_RETRIES = "FEELEDGER_CONFLICT_RETRIES"
ENV_NUMBER_ATTEMPTS = "FEELEDGER_NUMBER_ATTEMPTS"
ENV_SCHOOL_YEAR_START_MONTH = "FEELEDGER_SCHOOL_YEAR_START_MONTH"
ENV_LOG_LEVEL = "FEELEDGER_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerSettings:
    """Settings shared by the store and the domain services.

    Attributes:
        database_path: SQLite file path, or None for the default location
        busy_timeout: Seconds a writer waits for the SQLite write lock
        conflict_retries: Automatic retries of a unit after a version conflict
        number_attempts: Transaction number allocations tried before giving up
        school_year_start_month: Month (1-12) in which a school year begins
        log_level: Name of the root ``feeledger`` logger level
    """

    database_path: Optional[str] = None
    busy_timeout: float = 30.0
    conflict_retries: int = 3
    number_attempts: int = 5
    school_year_start_month: int = 6
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.busy_timeout <= 0:
            raise ConfigurationError("busy_timeout must be positive")
        if self.conflict_retries < 0:
            raise ConfigurationError("conflict_retries cannot be negative")
        if self.number_attempts < 1:
            raise ConfigurationError("number_attempts must be at least 1")
        if not 1 <= self.school_year_start_month <= 12:
            raise ConfigurationError("school_year_start_month must be between 1 and 12")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level '{self.log_level}'. Expected one of: {', '.join(_LOG_LEVELS)}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LedgerSettings":
        """Build settings from ``FEELEDGER_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (used by tests)

        Raises:
            ConfigurationError: If a variable holds an unparseable value
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            database_path=env.get(ENV_DB_PATH) or None,
            busy_timeout=_read(env, ENV_BUSY_TIMEOUT, float, defaults.busy_timeout),
            conflict_retries=_read(env, ENV_CONFLICT_RETRIES, int, defaults.conflict_retries),
            number_attempts=_read(env, ENV_NUMBER_ATTEMPTS, int, defaults.number_attempts),
            school_year_start_month=_read(
                env, ENV_SCHOOL_YEAR_START_MONTH, int, defaults.school_year_start_month
            ),
            log_level=env.get(ENV_LOG_LEVEL, defaults.log_level).upper(),
        )

    def with_overrides(self, **changes) -> "LedgerSettings":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def resolve_database_path(self) -> str:
        """Return the configured database path, defaulting to ~/.feeledger/feeledger.db."""
        if self.database_path:
            return self.database_path
        db_dir = Path.home() / ".feeledger"
        db_dir.mkdir(exist_ok=True)
        return str(db_dir / "feeledger.db")


def _read(env: Mapping[str, str], name: str, convert, default):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return convert(raw.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid value for {name}: '{raw}'") from None
