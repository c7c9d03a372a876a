"""Command-line interface for take_home_pay."""

import datetime
import json
import logging
from typing import Annotated

import typer

from take_home_pay import __version__
from take_home_pay.errors import TakeHomePayError
from take_home_pay.models import (
    CalculationResult,
    CalculatorInputs,
    PensionType,
    StudentLoanPlan,
)
from take_home_pay.tax_years import TaxYearConfig

app = typer.Typer(
    name="take-home-pay",
    help="UK take-home pay calculator",
    add_completion=False,
)

SalaryArg = Annotated[float, typer.Argument(help="Gross annual salary in GBP.")]
PensionOpt = Annotated[
    float,
    typer.Option("--pension", "-p", help="Pension contribution, % of gross salary."),
]
PensionTypeOpt = Annotated[
    PensionType,
    typer.Option("--pension-type", "-t", help="How the pension is paid."),
]
LoanOpt = Annotated[
    list[StudentLoanPlan] | None,
    typer.Option("--loan", "-l", help="Student loan plan. May be repeated."),
]
TaxYearOpt = Annotated[
    str | None,
    typer.Option("--tax-year", "-y", help="Tax year, e.g. 2024-25."),
]
DateOpt = Annotated[
    str | None,
    typer.Option(
        "--date",
        "-d",
        help="Pick the tax year in force on this date (YYYY-MM-DD). Default: today.",
    ),
]
JsonOpt = Annotated[bool, typer.Option("--json", help="Print the result as JSON.")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"take_home_pay version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable INFO logging."),
) -> None:
    """UK take-home pay calculator."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")


def format_gbp(amount: float) -> str:
    """Format *amount* as pounds with two decimal places."""
    sign = "-" if amount < 0 else ""
    return f"{sign}£{abs(amount):,.2f}"


def _resolve_config(tax_year: str | None, date: str | None) -> TaxYearConfig:
    """Return the configuration selected on the command line."""
    from take_home_pay.tax_years import (
        get_current_tax_year_config,
        get_tax_year_config,
    )

    try:
        if tax_year is not None:
            return get_tax_year_config(tax_year)
        as_of = datetime.date.fromisoformat(date) if date is not None else None
        return get_current_tax_year_config(as_of)
    except (TakeHomePayError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _breakdown_lines(result: CalculationResult) -> list[tuple[str, float]]:
    lines = [
        ("Gross salary", result.gross_salary),
        ("Income tax", -result.income_tax),
        ("National Insurance", -result.national_insurance),
        ("Pension contribution", -result.pension_contribution),
    ]
    if result.pension_tax_relief:
        lines.append(("Pension tax relief", result.pension_tax_relief))
    for item in result.student_loan_breakdown:
        label = (
            item.plan.label if isinstance(item.plan, StudentLoanPlan) else item.plan
        )
        lines.append((f"Student loan ({label})", -item.amount))
    lines.append(("Total deductions", -result.total_deductions))
    return lines


@app.command()
def calculate(
    salary: SalaryArg,
    pension: PensionOpt = 5.0,
    pension_type: PensionTypeOpt = PensionType.SALARY_SACRIFICE,
    loans: LoanOpt = None,
    tax_year: TaxYearOpt = None,
    date: DateOpt = None,
    as_json: JsonOpt = False,
) -> None:
    """Calculate take-home pay for a gross annual salary.

    Examples:

    \\b
        # 5% salary sacrifice pension, Plan 2 student loan
        take-home-pay calculate 35000 --pension 5 --loan plan2

    \\b
        # Relief-at-source pension for a named tax year, as JSON
        take-home-pay calculate 60000 -t relief-at-source -y 2024-25 --json
    """
    from take_home_pay.calculations import calculate_take_home

    config = _resolve_config(tax_year, date)
    inputs = CalculatorInputs(
        gross_salary=salary,
        pension_percentage=pension,
        pension_type=pension_type,
        student_loan_plans=tuple(loans or ()),
    )
    result = calculate_take_home(inputs, config)

    if as_json:
        typer.echo(
            json.dumps({"tax_year": config.tax_year, **result.to_dict()}, indent=2)
        )
        return

    typer.echo(f"Tax year {config.tax_year} ({config.region})")
    typer.echo(f"Taxable income: {format_gbp(result.taxable_income)}")
    for label, amount in _breakdown_lines(result):
        typer.echo(f"  {label:<28}{format_gbp(amount):>14}")
    typer.echo(f"Take-home pay: {format_gbp(result.take_home_pay)} per year")
    typer.echo(f"  {format_gbp(result.monthly_take_home)} per month")
    typer.echo(f"  {format_gbp(result.weekly_take_home)} per week")


@app.command()
def compare(
    salary: SalaryArg,
    pension: PensionOpt = 5.0,
    loans: LoanOpt = None,
    tax_year: TaxYearOpt = None,
    date: DateOpt = None,
    as_json: JsonOpt = False,
) -> None:
    """Compare take-home pay across the pension types."""
    from take_home_pay.calculations import compare_pension_types

    config = _resolve_config(tax_year, date)
    inputs = CalculatorInputs(
        gross_salary=salary,
        pension_percentage=pension,
        student_loan_plans=tuple(loans or ()),
    )
    results = compare_pension_types(inputs, config)

    if as_json:
        payload = {
            "tax_year": config.tax_year,
            "results": {str(k): v.to_dict() for k, v in results.items()},
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"Tax year {config.tax_year}, {pension:g}% pension")
    typer.echo(f"  {'Pension type':<20}{'Take-home':>14}{'Into pension':>14}")
    for pension_type, result in results.items():
        into_pension = result.pension_contribution + result.pension_tax_relief
        typer.echo(
            f"  {pension_type.value:<20}"
            f"{format_gbp(result.take_home_pay):>14}"
            f"{format_gbp(into_pension):>14}"
        )


@app.command(name="tax-years")
def tax_years() -> None:
    """List the bundled tax years."""
    from take_home_pay.tax_years import default_store

    store = default_store()
    for year in store.tax_years:
        config = store.get_config(year)
        typer.echo(
            f"{config.tax_year}  {config.region}  "
            f"{config.effective_from} to {config.effective_to}"
        )


@app.command()
def serve(
    host: str = typer.Option(
        "127.0.0.1", "--host", "-H", help="Host to bind the server to."
    ),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind the server to."),
    reload: bool = typer.Option(
        False, "--reload", help="Enable auto-reload for development."
    ),
) -> None:
    """Launch the calculator web API."""
    import uvicorn

    typer.echo(f"Starting take-home pay API at http://{host}:{port}")
    uvicorn.run(
        "take_home_pay.webapp.app:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
