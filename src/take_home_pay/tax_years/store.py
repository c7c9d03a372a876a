"""Lookup of tax-year configurations by identifier or by date."""

from __future__ import annotations

import datetime
import functools
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from take_home_pay.errors import ConfigError, ConfigNotFoundError
from take_home_pay.tax_years.config import load_tax_year

if TYPE_CHECKING:
    from collections.abc import Iterable

    from take_home_pay.tax_years.config import TaxYearConfig

logger = logging.getLogger(__name__)

_DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


class TaxYearStore:
    """Read-only mapping from tax-year identifier to configuration.

    Args:
        configs: Configurations to hold.  Identifiers must be unique.

    Raises:
        ConfigError: If two configurations share an identifier.
    """

    def __init__(self, configs: Iterable[TaxYearConfig]) -> None:
        by_year: dict[str, TaxYearConfig] = {}
        for config in configs:
            if config.tax_year in by_year:
                msg = f"Duplicate tax year {config.tax_year!r}"
                raise ConfigError(msg)
            by_year[config.tax_year] = config
        ordered = sorted(by_year.values(), key=lambda c: c.effective_from)
        self._configs = {c.tax_year: c for c in ordered}

    @classmethod
    def from_directory(cls, path: Path) -> TaxYearStore:
        """Load every ``*.yml`` file in *path*."""
        if not path.is_dir():
            msg = f"Tax year directory not found: {path}"
            raise ConfigError(msg)
        return cls(load_tax_year(p) for p in sorted(path.glob("*.yml")))

    @property
    def tax_years(self) -> tuple[str, ...]:
        """Loaded identifiers, oldest first."""
        return tuple(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, tax_year: object) -> bool:
        return tax_year in self._configs

    def get_config(self, tax_year: str) -> TaxYearConfig:
        """Return the configuration for exactly *tax_year*.

        Raises:
            ConfigNotFoundError: If *tax_year* is not loaded.
        """
        try:
            return self._configs[tax_year]
        except KeyError:
            raise ConfigNotFoundError(tax_year, self.tax_years) from None

    def get_current_config(
        self, as_of: datetime.date | None = None
    ) -> TaxYearConfig:
        """Return the configuration applicable on *as_of* (default: today).

        Resolution:

        1. With a single configuration loaded it is always returned.
        2. Otherwise the configuration whose validity interval contains
           *as_of* is returned; if several do, the latest
           ``effective_from`` wins.
        3. If none contains *as_of*, the most recent configuration already
           in force (latest ``effective_from`` not after *as_of*) is used.

        Raises:
            ConfigNotFoundError: If *as_of* precedes every loaded year, or
                nothing is loaded.
        """
        if as_of is None:
            as_of = datetime.date.today()

        configs = list(self._configs.values())
        if len(configs) == 1:
            return configs[0]

        covering = [c for c in configs if c.covers(as_of)]
        if covering:
            config = max(covering, key=lambda c: c.effective_from)
            logger.debug("Resolved tax year %s for %s", config.tax_year, as_of)
            return config

        in_force = [c for c in configs if c.effective_from <= as_of]
        if in_force:
            config = max(in_force, key=lambda c: c.effective_from)
            logger.warning(
                "No tax year covers %s; falling back to %s", as_of, config.tax_year
            )
            return config

        raise ConfigNotFoundError(as_of, self.tax_years)


@functools.cache
def default_store() -> TaxYearStore:
    """Return the store of bundled tax years, loaded once per process."""
    return TaxYearStore.from_directory(_DEFAULT_DATA_DIR)


def get_tax_year_config(tax_year: str) -> TaxYearConfig:
    """Return a bundled tax-year configuration by identifier.

    Example::

        >>> from take_home_pay.tax_years import get_tax_year_config
        >>> get_tax_year_config("2024-25").income_tax.personal_allowance
        12570.0
    """
    return default_store().get_config(tax_year)


def get_current_tax_year_config(
    as_of: datetime.date | None = None,
) -> TaxYearConfig:
    """Return the bundled configuration applicable on *as_of*."""
    return default_store().get_current_config(as_of)
