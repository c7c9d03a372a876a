"""UK take-home pay calculator.

Computes income tax, National Insurance, pension contributions and
student loan repayments for a gross annual salary under a given tax
year's statutory rates, and the resulting take-home pay.
"""

from take_home_pay.calculations import (
    calculate_employer_national_insurance,
    calculate_income_tax,
    calculate_national_insurance,
    calculate_pension,
    calculate_student_loan,
    calculate_student_loans,
    calculate_take_home,
    compare_pension_types,
)
from take_home_pay.errors import (
    ConfigError,
    ConfigNotFoundError,
    InvalidPlanError,
    TakeHomePayError,
)
from take_home_pay.models import (
    CalculationResult,
    CalculatorInputs,
    PensionType,
    StudentLoanBreakdown,
    StudentLoanPlan,
)
from take_home_pay.tax_years import (
    TaxYearConfig,
    get_current_tax_year_config,
    get_tax_year_config,
)

__version__ = "0.1.0"

__all__ = [
    "CalculationResult",
    "CalculatorInputs",
    "ConfigError",
    "ConfigNotFoundError",
    "InvalidPlanError",
    "PensionType",
    "StudentLoanBreakdown",
    "StudentLoanPlan",
    "TakeHomePayError",
    "TaxYearConfig",
    "__version__",
    "calculate_employer_national_insurance",
    "calculate_income_tax",
    "calculate_national_insurance",
    "calculate_pension",
    "calculate_student_loan",
    "calculate_student_loans",
    "calculate_take_home",
    "compare_pension_types",
    "get_current_tax_year_config",
    "get_tax_year_config",
]
