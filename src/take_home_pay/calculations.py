"""Take-home pay calculation engine.

Pure functions mapping a :class:`~take_home_pay.models.CalculatorInputs`
and a :class:`~take_home_pay.tax_years.TaxYearConfig` to an itemised
:class:`~take_home_pay.models.CalculationResult`.  Every entry point takes
the configuration explicitly; resolving the "current" tax year is the
caller's job.

No input validation is performed.  Negative salaries and pension
percentages outside ``0``-``100`` are run through the formulas as given.
The only failure is an unknown student loan plan, which raises
:class:`~take_home_pay.errors.InvalidPlanError`.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from take_home_pay.models import (
    CalculationResult,
    PensionType,
    StudentLoanBreakdown,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from take_home_pay.models import CalculatorInputs, StudentLoanPlan
    from take_home_pay.tax_years import TaxYearConfig

# Relief at source: the employee funds 80 % and basic-rate relief (20 %)
# is claimed by the pension provider.
_RELIEF_AT_SOURCE_EMPLOYEE_SHARE = 0.8
_RELIEF_AT_SOURCE_BASIC_RATE = 0.2

_MONTHS_PER_YEAR = 12
_WEEKS_PER_YEAR = 52


def calculate_pension(gross_salary: float, pension_percentage: float) -> float:
    """Return the pension contribution as a percentage of gross salary.

    Example::

        >>> calculate_pension(30_000, 5)
        1500.0
    """
    return gross_salary * pension_percentage / 100


def calculate_income_tax(taxable_income: float, config: TaxYearConfig) -> float:
    """Compute annual income tax on *taxable_income*.

    Income up to the personal allowance is tax free.  Above it, each band
    taxes the slice of income between the previous band's threshold (the
    personal allowance for the first band) and its own threshold; the top
    band has no upper limit.

    The personal allowance taper is not applied: the full allowance is used
    at every income level, even though the taper threshold and rate are
    configured.

    Args:
        taxable_income: Annual income after any pre-tax pension deduction.
        config: Tax-year configuration supplying the allowance and bands.

    Returns:
        Income tax due in pounds.

    Example::

        >>> from take_home_pay.tax_years import get_tax_year_config
        >>> round(calculate_income_tax(60_000, get_tax_year_config("2024-25")), 2)
        11432.0
    """
    income_tax = config.income_tax
    if taxable_income <= income_tax.personal_allowance:
        return 0.0

    tax = 0.0
    lower = income_tax.personal_allowance
    for band in income_tax.bands:
        if band.threshold is None or taxable_income <= band.threshold:
            return tax + (taxable_income - lower) * band.rate
        tax += (band.threshold - lower) * band.rate
        lower = band.threshold
    return tax


def calculate_national_insurance(income: float, config: TaxYearConfig) -> float:
    """Compute employee Class 1 National Insurance on *income*.

    Nothing is due up to the lower threshold; the lower rate applies
    between the two thresholds and the upper rate above the upper one.
    """
    ni = config.national_insurance.class1_employee
    if income <= ni.lower_threshold:
        return 0.0
    if income <= ni.upper_threshold:
        return (income - ni.lower_threshold) * ni.lower_rate
    return (ni.upper_threshold - ni.lower_threshold) * ni.lower_rate + (
        income - ni.upper_threshold
    ) * ni.upper_rate


def calculate_employer_national_insurance(
    gross_salary: float, config: TaxYearConfig
) -> float:
    """Compute employer secondary Class 1 NI on a gross salary.

    This is a cost to the employer and never appears in the employee's
    deductions.
    """
    employer = config.national_insurance.class1_employer
    return max(gross_salary - employer.threshold, 0.0) * employer.rate


def calculate_student_loan(
    gross_salary: float, plan: StudentLoanPlan | str, config: TaxYearConfig
) -> float:
    """Compute the repayment due under a single student loan plan.

    Repayments are always assessed on gross salary, whatever the pension
    arrangement.

    Raises:
        InvalidPlanError: If *plan* is not configured for the tax year.
    """
    plan_config = config.student_loan_plan(plan)
    if gross_salary <= plan_config.threshold:
        return 0.0
    return (gross_salary - plan_config.threshold) * plan_config.rate


def calculate_student_loans(
    gross_salary: float,
    plans: Iterable[StudentLoanPlan | str],
    config: TaxYearConfig,
) -> tuple[float, tuple[StudentLoanBreakdown, ...]]:
    """Compute repayments for several plans.

    Returns:
        A ``(total, breakdown)`` pair.  The breakdown has one entry per
        input plan in input order; duplicate plans are not merged.
    """
    breakdown = tuple(
        StudentLoanBreakdown(
            plan=plan, amount=calculate_student_loan(gross_salary, plan, config)
        )
        for plan in plans
    )
    total = sum((item.amount for item in breakdown), 0.0)
    return total, breakdown


def calculate_take_home(
    inputs: CalculatorInputs, config: TaxYearConfig
) -> CalculationResult:
    """Compute the full take-home pay breakdown for one set of inputs.

    Salary sacrifice and net pay arrangements take the pension out of pay
    before income tax and NI are worked out.  Relief at source leaves the
    tax base untouched: the employee pays 80 % of the contribution from
    taxed pay and the 20 % basic-rate relief goes straight into the
    pension, so it is reported as ``pension_tax_relief`` rather than
    added to take-home pay.

    Args:
        inputs: Salary, pension and student loan choices.
        config: Tax-year configuration to apply.

    Returns:
        The itemised :class:`CalculationResult`.

    Raises:
        InvalidPlanError: If a student loan plan is not configured.
    """
    gross_salary = inputs.gross_salary
    pension_contribution = calculate_pension(gross_salary, inputs.pension_percentage)

    if inputs.pension_type == PensionType.RELIEF_AT_SOURCE:
        taxable_income = gross_salary
        niable_income = gross_salary
        pension_cost = pension_contribution * _RELIEF_AT_SOURCE_EMPLOYEE_SHARE
        pension_tax_relief = pension_contribution * _RELIEF_AT_SOURCE_BASIC_RATE
    else:
        taxable_income = gross_salary - pension_contribution
        niable_income = gross_salary - pension_contribution
        pension_cost = pension_contribution
        pension_tax_relief = 0.0

    income_tax = calculate_income_tax(taxable_income, config)
    national_insurance = calculate_national_insurance(niable_income, config)
    loan_total, loan_breakdown = calculate_student_loans(
        gross_salary, inputs.student_loan_plans, config
    )

    total_deductions = income_tax + national_insurance + pension_cost + loan_total
    take_home_pay = gross_salary - total_deductions

    return CalculationResult(
        gross_salary=gross_salary,
        taxable_income=taxable_income,
        income_tax=income_tax,
        national_insurance=national_insurance,
        pension_contribution=pension_contribution,
        pension_tax_relief=pension_tax_relief,
        student_loan_repayment=loan_total,
        student_loan_breakdown=loan_breakdown,
        total_deductions=total_deductions,
        take_home_pay=take_home_pay,
        monthly_take_home=take_home_pay / _MONTHS_PER_YEAR,
        weekly_take_home=take_home_pay / _WEEKS_PER_YEAR,
    )


def compare_pension_types(
    inputs: CalculatorInputs, config: TaxYearConfig
) -> dict[PensionType, CalculationResult]:
    """Run :func:`calculate_take_home` once for every pension type.

    The other inputs are held fixed, so the results show how the choice of
    scheme alone changes take-home pay.
    """
    return {
        pension_type: calculate_take_home(
            replace(inputs, pension_type=pension_type), config
        )
        for pension_type in PensionType
    }
