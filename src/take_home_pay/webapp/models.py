"""Pydantic models for the take-home pay API."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, Field

from take_home_pay.models import PensionType, StudentLoanPlan


class CalculationRequest(BaseModel):
    """Inputs for a take-home calculation.

    Numeric ranges are deliberately unconstrained: out-of-range values are
    computed through the formulas rather than rejected.
    """

    gross_salary: float = Field(30_000.0, description="Gross annual salary (GBP)")
    pension_percentage: float = Field(
        5.0, description="Pension contribution as % of gross salary"
    )
    pension_type: PensionType = Field(
        PensionType.SALARY_SACRIFICE, description="Pension arrangement"
    )
    student_loan_plans: list[StudentLoanPlan] = Field(
        default_factory=list, description="Student loan plans, in display order"
    )
    tax_year: str | None = Field(
        None, description="Tax year identifier, e.g. '2024-25'"
    )
    as_of: datetime.date | None = Field(
        None, description="Pick the tax year in force on this date"
    )


class StudentLoanItem(BaseModel):
    plan: str
    amount: float


class CalculationResponse(BaseModel):
    """Itemised deductions and take-home pay."""

    tax_year: str
    gross_salary: float
    taxable_income: float
    income_tax: float
    national_insurance: float
    pension_contribution: float
    pension_tax_relief: float
    student_loan_repayment: float
    student_loan_breakdown: list[StudentLoanItem]
    total_deductions: float
    take_home_pay: float
    monthly_take_home: float
    weekly_take_home: float
    effective_deduction_rate: float


class ComparisonResponse(BaseModel):
    """One result per pension type for otherwise identical inputs."""

    tax_year: str
    results: dict[PensionType, CalculationResponse]


class TaxYearSummary(BaseModel):
    tax_year: str
    region: str
    effective_from: datetime.date
    effective_to: datetime.date


class TaxYearsResponse(BaseModel):
    tax_years: list[TaxYearSummary]
