"""Exceptions raised by take_home_pay."""

from __future__ import annotations


class TakeHomePayError(Exception):
    """Base class for all take_home_pay errors."""


class ConfigError(TakeHomePayError, ValueError):
    """A tax-year data file is missing or malformed."""


class ConfigNotFoundError(TakeHomePayError, LookupError):
    """No tax-year configuration matches the requested year or date.

    Attributes:
        key: The tax-year identifier or date that was requested.
        available: Identifiers of the configurations that are loaded.
    """

    def __init__(self, key: object, available: tuple[str, ...] = ()) -> None:
        self.key = key
        self.available = available
        msg = f"Tax year {key!s} configuration not found"
        if available:
            msg += f"; available: {', '.join(available)}"
        super().__init__(msg)


class InvalidPlanError(TakeHomePayError, LookupError):
    """A student-loan plan identifier is not present in the configuration."""

    def __init__(self, plan: object) -> None:
        self.plan = plan
        super().__init__(f"Unknown student loan plan {str(plan)!r}")
