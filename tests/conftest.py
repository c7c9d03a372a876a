"""Pytest configuration and fixtures."""

import sys
from collections.abc import Generator

import pytest

from take_home_pay.tax_years import TaxYearConfig, get_tax_year_config


@pytest.fixture(autouse=True)
def reset_typer_force_terminal() -> Generator[None]:
    """Reset typer.rich_utils.FORCE_TERMINAL before each test.

    When FORCE_COLOR=1 is set in CI, the first CLI ``--help`` invocation
    imports ``typer.rich_utils`` which sets the module-level constant
    ``FORCE_TERMINAL = True`` at import time.  The cached value would make
    later CLI invocations emit ANSI escape codes regardless of the
    environment passed to ``CliRunner``, so it is reset before every test.
    """
    ru = sys.modules.get("typer.rich_utils")
    old = ru.FORCE_TERMINAL if ru is not None else None
    if ru is not None:
        ru.FORCE_TERMINAL = None
    yield
    if ru is not None:
        ru.FORCE_TERMINAL = old


@pytest.fixture
def config() -> TaxYearConfig:
    """The bundled 2024-25 configuration."""
    return get_tax_year_config("2024-25")
