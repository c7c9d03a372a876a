"""Versioned UK tax-year configuration.

One YAML document per tax year is bundled under ``data/`` and loaded into
frozen dataclasses.  Configurations are read-only once loaded.
"""

from take_home_pay.tax_years.config import (
    IncomeTaxBand,
    IncomeTaxConfig,
    NationalInsuranceConfig,
    NIClass1Employee,
    NIClass1Employer,
    OtherConfig,
    Region,
    StudentLoanPlanConfig,
    TaxYearConfig,
    load_tax_year,
    parse_tax_year,
)
from take_home_pay.tax_years.store import (
    TaxYearStore,
    default_store,
    get_current_tax_year_config,
    get_tax_year_config,
)

__all__ = [
    "IncomeTaxBand",
    "IncomeTaxConfig",
    "NIClass1Employee",
    "NIClass1Employer",
    "NationalInsuranceConfig",
    "OtherConfig",
    "Region",
    "StudentLoanPlanConfig",
    "TaxYearConfig",
    "TaxYearStore",
    "default_store",
    "get_current_tax_year_config",
    "get_tax_year_config",
    "load_tax_year",
    "parse_tax_year",
]
