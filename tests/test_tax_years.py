"""Tests for tax-year configuration loading and lookup."""

from __future__ import annotations

import datetime
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

import pytest
import yaml

from take_home_pay.errors import ConfigError, ConfigNotFoundError, InvalidPlanError
from take_home_pay.models import StudentLoanPlan
from take_home_pay.tax_years import (
    Region,
    TaxYearConfig,
    TaxYearStore,
    default_store,
    get_current_tax_year_config,
    get_tax_year_config,
    load_tax_year,
)

if TYPE_CHECKING:
    from pathlib import Path


def _raw() -> dict[str, Any]:
    """A valid tax-year document."""
    return {
        "tax_year": "2030-31",
        "region": "england-wales-ni",
        "effective_from": "2030-04-06",
        "effective_to": "2031-04-05",
        "income_tax": {
            "personal_allowance": 13_000,
            "personal_allowance_taper_threshold": 100_000,
            "personal_allowance_taper_rate": 0.5,
            "bands": [
                {"name": "basic", "threshold": 52_000, "rate": 0.2},
                {"name": "higher", "threshold": 130_000, "rate": 0.4},
                {"name": "additional", "threshold": None, "rate": 0.45},
            ],
        },
        "national_insurance": {
            "class1_employee": {
                "lower_threshold": 13_000,
                "upper_threshold": 52_000,
                "lower_rate": 0.08,
                "upper_rate": 0.02,
            },
            "class1_employer": {"threshold": 5_000, "rate": 0.15},
        },
        "student_loans": {
            "plan1": {"threshold": 26_000, "rate": 0.09},
            "plan2": {"threshold": 29_000, "rate": 0.09},
            "plan4": {"threshold": 32_000, "rate": 0.09},
            "postgrad": {"threshold": 21_000, "rate": 0.06},
        },
        "other": {
            "apprenticeship_levy_threshold": 3_000_000,
            "apprenticeship_levy_rate": 0.005,
        },
    }


def _write(path: Path, raw: dict[str, Any]) -> Path:
    with path.open("w") as fh:
        yaml.safe_dump(raw, fh)
    return path


def _year(
    base: TaxYearConfig, tax_year: str, start: datetime.date, end: datetime.date
) -> TaxYearConfig:
    return replace(base, tax_year=tax_year, effective_from=start, effective_to=end)


# ---------------------------------------------------------------------------
# Bundled configuration
# ---------------------------------------------------------------------------


class TestBundledConfig:
    def test_2024_25_income_tax(self, config: TaxYearConfig):
        assert config.tax_year == "2024-25"
        assert config.region is Region.ENGLAND_WALES_NI
        assert config.income_tax.personal_allowance == 12_570
        assert [b.threshold for b in config.income_tax.bands] == [
            50_270,
            125_140,
            None,
        ]
        assert [b.rate for b in config.income_tax.bands] == [0.2, 0.4, 0.45]

    def test_2024_25_validity_interval(self, config: TaxYearConfig):
        assert config.effective_from == datetime.date(2024, 4, 6)
        assert config.effective_to == datetime.date(2025, 4, 5)

    def test_2024_25_national_insurance(self, config: TaxYearConfig):
        employee = config.national_insurance.class1_employee
        assert employee.lower_threshold == 12_570
        assert employee.upper_threshold == 50_270
        assert employee.lower_rate == pytest.approx(0.12)
        assert employee.upper_rate == pytest.approx(0.02)

    def test_2024_25_student_loans(self, config: TaxYearConfig):
        assert config.student_loans[StudentLoanPlan.PLAN2].threshold == 27_295
        assert config.student_loans[StudentLoanPlan.POSTGRAD].rate == pytest.approx(
            0.06
        )
        assert set(config.student_loans) == set(StudentLoanPlan)

    def test_unused_fields_loaded(self, config: TaxYearConfig):
        assert config.income_tax.personal_allowance_taper_threshold == 100_000
        assert config.national_insurance.class1_employer.rate == pytest.approx(0.138)
        assert config.other.apprenticeship_levy_rate == pytest.approx(0.005)

    def test_student_loans_read_only(self, config: TaxYearConfig):
        with pytest.raises(TypeError):
            config.student_loans["plan5"] = config.student_loans["plan1"]  # type: ignore[index]

    def test_student_loan_plan_lookup(self, config: TaxYearConfig):
        assert config.student_loan_plan("plan1").threshold == 22_015
        with pytest.raises(InvalidPlanError):
            config.student_loan_plan("plan5")

    def test_get_tax_year_config(self):
        assert get_tax_year_config("2024-25") is default_store().get_config("2024-25")

    def test_unknown_tax_year_raises(self):
        with pytest.raises(ConfigNotFoundError, match="2019-20"):
            get_tax_year_config("2019-20")

    def test_current_with_single_year_ignores_date(self):
        for day in (datetime.date(1990, 1, 1), datetime.date(2040, 1, 1), None):
            assert get_current_tax_year_config(day).tax_year == "2024-25"


# ---------------------------------------------------------------------------
# Store lookup
# ---------------------------------------------------------------------------


class TestTaxYearStore:
    @pytest.fixture
    def store(self, config: TaxYearConfig) -> TaxYearStore:
        return TaxYearStore(
            [
                _year(
                    config,
                    "2025-26",
                    datetime.date(2025, 4, 6),
                    datetime.date(2026, 4, 5),
                ),
                config,
            ]
        )

    def test_tax_years_ordered_by_start(self, store: TaxYearStore):
        assert store.tax_years == ("2024-25", "2025-26")
        assert len(store) == 2
        assert "2025-26" in store

    def test_get_config(self, store: TaxYearStore):
        assert store.get_config("2025-26").tax_year == "2025-26"

    def test_get_config_unknown_lists_available(self, store: TaxYearStore):
        with pytest.raises(ConfigNotFoundError) as excinfo:
            store.get_config("2026-27")
        assert excinfo.value.key == "2026-27"
        assert excinfo.value.available == ("2024-25", "2025-26")
        assert "2024-25, 2025-26" in str(excinfo.value)

    def test_not_found_is_lookup_error(self, store: TaxYearStore):
        with pytest.raises(LookupError):
            store.get_config("nope")

    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (datetime.date(2024, 4, 6), "2024-25"),
            (datetime.date(2024, 12, 1), "2024-25"),
            (datetime.date(2025, 4, 5), "2024-25"),
            (datetime.date(2025, 4, 6), "2025-26"),
            (datetime.date(2026, 4, 5), "2025-26"),
        ],
    )
    def test_current_by_interval(self, store: TaxYearStore, day, expected):
        assert store.get_current_config(day).tax_year == expected

    def test_overlap_prefers_latest_start(self, config: TaxYearConfig):
        store = TaxYearStore(
            [
                config,
                _year(
                    config,
                    "2024-25-revised",
                    datetime.date(2024, 10, 1),
                    datetime.date(2025, 4, 5),
                ),
            ]
        )
        assert (
            store.get_current_config(datetime.date(2024, 11, 1)).tax_year
            == "2024-25-revised"
        )
        assert store.get_current_config(datetime.date(2024, 5, 1)).tax_year == "2024-25"

    def test_gap_falls_back_to_latest_in_force(
        self, config: TaxYearConfig, caplog: pytest.LogCaptureFixture
    ):
        store = TaxYearStore(
            [
                _year(
                    config,
                    "2023-24",
                    datetime.date(2023, 4, 6),
                    datetime.date(2024, 4, 5),
                ),
                _year(
                    config,
                    "2025-26",
                    datetime.date(2025, 4, 6),
                    datetime.date(2026, 4, 5),
                ),
            ]
        )
        with caplog.at_level(logging.WARNING, logger="take_home_pay.tax_years.store"):
            resolved = store.get_current_config(datetime.date(2024, 10, 1))
        assert resolved.tax_year == "2023-24"
        assert "falling back to 2023-24" in caplog.text

    def test_after_last_year_uses_latest(self, store: TaxYearStore):
        assert store.get_current_config(datetime.date(2030, 1, 1)).tax_year == "2025-26"

    def test_before_every_year_raises(self, store: TaxYearStore):
        with pytest.raises(ConfigNotFoundError):
            store.get_current_config(datetime.date(2020, 1, 1))

    def test_empty_store_raises(self):
        with pytest.raises(ConfigNotFoundError):
            TaxYearStore([]).get_current_config(datetime.date(2024, 6, 1))

    def test_duplicate_tax_year_rejected(self, config: TaxYearConfig):
        with pytest.raises(ConfigError, match="Duplicate"):
            TaxYearStore([config, config])


# ---------------------------------------------------------------------------
# Loading from YAML
# ---------------------------------------------------------------------------


class TestLoadTaxYear:
    def test_load_valid_file(self, tmp_path: Path):
        cfg = load_tax_year(_write(tmp_path / "2030-31.yml", _raw()))
        assert cfg.tax_year == "2030-31"
        assert cfg.effective_from == datetime.date(2030, 4, 6)
        assert cfg.income_tax.bands[2].threshold is None
        assert cfg.national_insurance.class1_employee.lower_rate == pytest.approx(0.08)
        assert cfg.student_loans[StudentLoanPlan.PLAN4].threshold == 32_000

    def test_load_logs_tax_year(self, tmp_path: Path, caplog):
        with caplog.at_level(logging.INFO, logger="take_home_pay.tax_years.config"):
            load_tax_year(_write(tmp_path / "2030-31.yml", _raw()))
        assert "Loaded tax year 2030-31" in caplog.text

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_tax_year(tmp_path / "nonexistent.yml")

    def test_empty_file_raises(self, tmp_path: Path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        with pytest.raises(ConfigError):
            load_tax_year(path)

    def test_config_error_is_value_error(self, tmp_path: Path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_tax_year(path)

    def test_wrong_band_count(self, tmp_path: Path):
        raw = _raw()
        raw["income_tax"]["bands"] = raw["income_tax"]["bands"][1:]
        with pytest.raises(ConfigError, match="exactly 3 bands"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_bounded_top_band(self, tmp_path: Path):
        raw = _raw()
        raw["income_tax"]["bands"][2]["threshold"] = 200_000
        with pytest.raises(ConfigError, match="unbounded"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_descending_thresholds(self, tmp_path: Path):
        raw = _raw()
        raw["income_tax"]["bands"][1]["threshold"] = 40_000
        with pytest.raises(ConfigError, match="ascending"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_rate_above_one(self, tmp_path: Path):
        raw = _raw()
        raw["national_insurance"]["class1_employee"]["lower_rate"] = 12
        with pytest.raises(ConfigError, match="fraction"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_negative_threshold(self, tmp_path: Path):
        raw = _raw()
        raw["student_loans"]["plan1"]["threshold"] = -1
        with pytest.raises(ConfigError, match="non-negative"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_non_numeric_value(self, tmp_path: Path):
        raw = _raw()
        raw["income_tax"]["personal_allowance"] = "lots"
        with pytest.raises(ConfigError, match="must be a number"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_missing_plan(self, tmp_path: Path):
        raw = _raw()
        del raw["student_loans"]["postgrad"]
        with pytest.raises(ConfigError, match="student_loans.postgrad"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_unknown_region(self, tmp_path: Path):
        raw = _raw()
        raw["region"] = "wales"
        with pytest.raises(ConfigError, match="region"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_scotland_region_accepted(self, tmp_path: Path):
        raw = _raw()
        raw["region"] = "scotland"
        assert load_tax_year(_write(tmp_path / "s.yml", raw)).region is Region.SCOTLAND

    def test_inverted_interval(self, tmp_path: Path):
        raw = _raw()
        raw["effective_to"] = "2029-01-01"
        with pytest.raises(ConfigError, match="after"):
            load_tax_year(_write(tmp_path / "bad.yml", raw))

    def test_error_names_file(self, tmp_path: Path):
        raw = _raw()
        del raw["other"]
        path = _write(tmp_path / "bad.yml", raw)
        with pytest.raises(ConfigError, match="bad.yml"):
            load_tax_year(path)


class TestFromDirectory:
    def test_loads_every_file(self, tmp_path: Path):
        first = _raw()
        second = _raw()
        second.update(
            tax_year="2031-32",
            effective_from="2031-04-06",
            effective_to="2032-04-05",
        )
        _write(tmp_path / "2031-32.yml", second)
        _write(tmp_path / "2030-31.yml", first)

        store = TaxYearStore.from_directory(tmp_path)
        assert store.tax_years == ("2030-31", "2031-32")
        assert (
            store.get_current_config(datetime.date(2031, 6, 1)).tax_year == "2031-32"
        )

    def test_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            TaxYearStore.from_directory(tmp_path / "missing")
