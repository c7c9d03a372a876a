"""Input and result records for a single take-home calculation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class PensionType(StrEnum):
    """How the employee's pension contribution is taken from pay."""

    SALARY_SACRIFICE = "salary-sacrifice"
    RELIEF_AT_SOURCE = "relief-at-source"
    NET_PAY = "net-pay"


class StudentLoanPlan(StrEnum):
    """UK income-contingent student loan repayment plans."""

    PLAN1 = "plan1"
    PLAN2 = "plan2"
    PLAN4 = "plan4"
    POSTGRAD = "postgrad"

    @property
    def label(self) -> str:
        """Human-readable plan name."""
        if self is StudentLoanPlan.POSTGRAD:
            return "Postgraduate"
        return f"Plan {self.value[-1]}"


@dataclass(frozen=True)
class CalculatorInputs:
    """Everything the user supplies for one calculation.

    Attributes:
        gross_salary: Annual gross salary in pounds.
        pension_percentage: Employee pension contribution as a percentage
            of gross salary (normally ``0``-``100``, not enforced).
        pension_type: Pension scheme the contribution is made through.
        student_loan_plans: Plans the employee repays, in display order.
            Duplicates are kept and produce duplicate breakdown entries.
    """

    gross_salary: float = 30_000.0
    pension_percentage: float = 5.0
    pension_type: PensionType = PensionType.SALARY_SACRIFICE
    student_loan_plans: tuple[StudentLoanPlan | str, ...] = ()


@dataclass(frozen=True)
class StudentLoanBreakdown:
    """Repayment due under a single student loan plan."""

    plan: StudentLoanPlan | str
    amount: float


@dataclass(frozen=True)
class CalculationResult:
    """Itemised annual deductions and take-home pay.

    All amounts are unrounded pounds; rounding is a display concern.
    ``pension_tax_relief`` is the basic-rate top-up paid into the pension
    under relief at source and is not part of ``take_home_pay``.
    """

    gross_salary: float
    taxable_income: float
    income_tax: float
    national_insurance: float
    pension_contribution: float
    pension_tax_relief: float
    student_loan_repayment: float
    total_deductions: float
    take_home_pay: float
    monthly_take_home: float
    weekly_take_home: float
    student_loan_breakdown: tuple[StudentLoanBreakdown, ...] = field(
        default_factory=tuple
    )

    @property
    def effective_deduction_rate(self) -> float:
        """Total deductions as a fraction of gross salary."""
        if self.gross_salary == 0:
            return 0.0
        return self.total_deductions / self.gross_salary

    def to_dict(self) -> dict[str, Any]:
        """Return the result as plain, JSON-serialisable data."""
        data = asdict(self)
        data["student_loan_breakdown"] = [
            {"plan": str(item.plan), "amount": item.amount}
            for item in self.student_loan_breakdown
        ]
        data["effective_deduction_rate"] = self.effective_deduction_rate
        return data
