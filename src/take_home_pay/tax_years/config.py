"""Tax-year configuration schema and YAML loading.

Statutory rates and thresholds change at most once a year (at the Budget
or Autumn Statement) and are stored as one versioned YAML document per
tax year rather than hard-coded.  Tax years run from 6 April to 5 April.

Sources:

- HMRC Income Tax rates and Personal Allowances:
  https://www.gov.uk/income-tax-rates
- HMRC National Insurance contributions:
  https://www.gov.uk/national-insurance/how-much-you-pay
- Student loan repayment thresholds:
  https://www.gov.uk/repaying-your-student-loan/what-you-pay

All information is reproduced under the Open Government Licence v3.0.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

import yaml

from take_home_pay.errors import ConfigError, InvalidPlanError
from take_home_pay.models import StudentLoanPlan

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any

logger = logging.getLogger(__name__)

_BAND_COUNT = 3


class Region(StrEnum):
    """Tax region a configuration applies to."""

    ENGLAND_WALES_NI = "england-wales-ni"
    SCOTLAND = "scotland"


@dataclass(frozen=True)
class IncomeTaxBand:
    """A single income-tax band.

    Attributes:
        name: Band label (e.g. ``"basic"``, ``"higher"``, ``"additional"``).
        threshold: Upper edge of the band in pounds of taxable income
            (``None`` means no cap).
        rate: Marginal tax rate as a fraction (e.g. ``0.20`` for 20 %).
    """

    name: str
    threshold: float | None
    rate: float


@dataclass(frozen=True)
class IncomeTaxConfig:
    """Personal allowance and the basic, higher and additional bands.

    The taper fields describe the allowance withdrawal above the taper
    threshold.  They are stored for completeness; the engine does not
    apply them.
    """

    personal_allowance: float
    personal_allowance_taper_threshold: float
    personal_allowance_taper_rate: float
    bands: tuple[IncomeTaxBand, ...]


@dataclass(frozen=True)
class NIClass1Employee:
    """Employee Class 1 National Insurance thresholds and rates."""

    lower_threshold: float
    upper_threshold: float
    lower_rate: float
    upper_rate: float


@dataclass(frozen=True)
class NIClass1Employer:
    """Employer (secondary) Class 1 National Insurance."""

    threshold: float
    rate: float


@dataclass(frozen=True)
class NationalInsuranceConfig:
    class1_employee: NIClass1Employee
    class1_employer: NIClass1Employer


@dataclass(frozen=True)
class StudentLoanPlanConfig:
    """Repayment threshold (GBP/year) and rate for one plan."""

    threshold: float
    rate: float


@dataclass(frozen=True)
class OtherConfig:
    apprenticeship_levy_threshold: float
    apprenticeship_levy_rate: float


@dataclass(frozen=True)
class TaxYearConfig:
    """Complete statutory parameters for one tax year and region."""

    tax_year: str
    region: Region
    effective_from: datetime.date
    effective_to: datetime.date
    income_tax: IncomeTaxConfig
    national_insurance: NationalInsuranceConfig
    student_loans: Mapping[str, StudentLoanPlanConfig]
    other: OtherConfig

    def student_loan_plan(self, plan: StudentLoanPlan | str) -> StudentLoanPlanConfig:
        """Return the threshold and rate for *plan*.

        Raises:
            InvalidPlanError: If *plan* is not configured for this year.
        """
        try:
            return self.student_loans[plan]
        except (KeyError, TypeError):
            raise InvalidPlanError(plan) from None

    def covers(self, day: datetime.date) -> bool:
        """Return ``True`` if *day* falls inside the validity interval."""
        return self.effective_from <= day <= self.effective_to


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _section(raw: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Walk a nested dict using *keys*; missing sections are a ConfigError."""
    node: Any = raw
    path = []
    for k in keys:
        path.append(k)
        node = node.get(k) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            msg = f"Missing section {'.'.join(path)!r}"
            raise ConfigError(msg)
    return node


def _amount(node: dict[str, Any], key: str) -> float:
    try:
        value = float(node[key])
    except KeyError:
        msg = f"Missing value {key!r}"
        raise ConfigError(msg) from None
    except (TypeError, ValueError):
        msg = f"Value {key!r} must be a number, got {node[key]!r}"
        raise ConfigError(msg) from None
    if value < 0:
        msg = f"Value {key!r} must be non-negative, got {value}"
        raise ConfigError(msg)
    return value


def _rate(node: dict[str, Any], key: str) -> float:
    value = _amount(node, key)
    if value > 1:
        msg = f"Rate {key!r} must be a fraction between 0 and 1, got {value}"
        raise ConfigError(msg)
    return value


def _date(raw: dict[str, Any], key: str) -> datetime.date:
    value = raw.get(key)
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(str(value))
    except ValueError:
        msg = f"{key!r} must be an ISO date, got {value!r}"
        raise ConfigError(msg) from None


def _parse_bands(raw_bands: Any) -> tuple[IncomeTaxBand, ...]:
    if not isinstance(raw_bands, list) or len(raw_bands) != _BAND_COUNT:
        msg = f"Income tax must define exactly {_BAND_COUNT} bands"
        raise ConfigError(msg)

    bands = []
    for i, raw in enumerate(raw_bands):
        if not isinstance(raw, dict):
            msg = f"Band {i} must be a mapping"
            raise ConfigError(msg)
        last = i == _BAND_COUNT - 1
        if last:
            if raw.get("threshold") is not None:
                msg = "The top income tax band must be unbounded (threshold: null)"
                raise ConfigError(msg)
            threshold = None
        else:
            threshold = _amount(raw, "threshold")
        bands.append(
            IncomeTaxBand(
                name=str(raw.get("name", f"band{i + 1}")),
                threshold=threshold,
                rate=_rate(raw, "rate"),
            )
        )

    if bands[0].threshold >= bands[1].threshold:  # type: ignore[operator]
        msg = "Income tax band thresholds must be ascending"
        raise ConfigError(msg)
    return tuple(bands)


def parse_tax_year(raw: dict[str, Any]) -> TaxYearConfig:
    """Build a :class:`TaxYearConfig` from a parsed YAML document.

    Raises:
        ConfigError: If a section or value is missing or out of range.
    """
    tax_year = raw.get("tax_year")
    if not tax_year:
        msg = "Missing value 'tax_year'"
        raise ConfigError(msg)

    try:
        region = Region(raw.get("region", Region.ENGLAND_WALES_NI))
    except ValueError:
        msg = f"Unknown region {raw.get('region')!r}"
        raise ConfigError(msg) from None

    effective_from = _date(raw, "effective_from")
    effective_to = _date(raw, "effective_to")
    if effective_from > effective_to:
        msg = f"effective_from {effective_from} is after effective_to {effective_to}"
        raise ConfigError(msg)

    it_raw = _section(raw, "income_tax")
    income_tax = IncomeTaxConfig(
        personal_allowance=_amount(it_raw, "personal_allowance"),
        personal_allowance_taper_threshold=_amount(
            it_raw, "personal_allowance_taper_threshold"
        ),
        personal_allowance_taper_rate=_rate(it_raw, "personal_allowance_taper_rate"),
        bands=_parse_bands(it_raw.get("bands")),
    )

    employee_raw = _section(raw, "national_insurance", "class1_employee")
    employer_raw = _section(raw, "national_insurance", "class1_employer")
    national_insurance = NationalInsuranceConfig(
        class1_employee=NIClass1Employee(
            lower_threshold=_amount(employee_raw, "lower_threshold"),
            upper_threshold=_amount(employee_raw, "upper_threshold"),
            lower_rate=_rate(employee_raw, "lower_rate"),
            upper_rate=_rate(employee_raw, "upper_rate"),
        ),
        class1_employer=NIClass1Employer(
            threshold=_amount(employer_raw, "threshold"),
            rate=_rate(employer_raw, "rate"),
        ),
    )

    student_loans = {}
    for plan in StudentLoanPlan:
        plan_raw = _section(raw, "student_loans", plan.value)
        student_loans[plan] = StudentLoanPlanConfig(
            threshold=_amount(plan_raw, "threshold"),
            rate=_rate(plan_raw, "rate"),
        )

    other_raw = _section(raw, "other")
    other = OtherConfig(
        apprenticeship_levy_threshold=_amount(
            other_raw, "apprenticeship_levy_threshold"
        ),
        apprenticeship_levy_rate=_rate(other_raw, "apprenticeship_levy_rate"),
    )

    return TaxYearConfig(
        tax_year=str(tax_year),
        region=region,
        effective_from=effective_from,
        effective_to=effective_to,
        income_tax=income_tax,
        national_insurance=national_insurance,
        student_loans=MappingProxyType(student_loans),
        other=other,
    )


def load_tax_year(path: Path) -> TaxYearConfig:
    """Load one tax-year configuration from a YAML file.

    Args:
        path: Path to a ``<tax-year>.yml`` document.

    Returns:
        The parsed, validated :class:`TaxYearConfig`.

    Raises:
        ConfigError: If the file is missing, empty or malformed.  Statutory
            numbers are never filled in with defaults.
    """
    if not path.exists():
        msg = f"Tax year file not found: {path}"
        raise ConfigError(msg)

    with path.open() as fh:
        loaded = yaml.safe_load(fh)
    if not isinstance(loaded, dict):
        msg = f"Tax year file {path} does not contain a mapping"
        raise ConfigError(msg)

    try:
        config = parse_tax_year(loaded)
    except ConfigError as exc:
        msg = f"{path}: {exc}"
        raise ConfigError(msg) from exc

    logger.info("Loaded tax year %s from %s", config.tax_year, path)
    return config
