"""FastAPI application exposing the take-home pay calculator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, HTTPException

from take_home_pay import __version__
from take_home_pay.calculations import calculate_take_home, compare_pension_types
from take_home_pay.errors import ConfigNotFoundError, InvalidPlanError
from take_home_pay.models import CalculatorInputs
from take_home_pay.tax_years import default_store
from take_home_pay.webapp.models import (
    CalculationRequest,
    CalculationResponse,
    ComparisonResponse,
    TaxYearsResponse,
    TaxYearSummary,
)

if TYPE_CHECKING:
    from take_home_pay.models import CalculationResult
    from take_home_pay.tax_years import TaxYearConfig

app = FastAPI(
    title="Take-Home Pay Calculator",
    description="UK income tax, NI, pension and student loan deductions",
    version=__version__,
)


def _resolve_config(request: CalculationRequest) -> TaxYearConfig:
    store = default_store()
    try:
        if request.tax_year is not None:
            return store.get_config(request.tax_year)
        return store.get_current_config(request.as_of)
    except ConfigNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _to_inputs(request: CalculationRequest) -> CalculatorInputs:
    return CalculatorInputs(
        gross_salary=request.gross_salary,
        pension_percentage=request.pension_percentage,
        pension_type=request.pension_type,
        student_loan_plans=tuple(request.student_loan_plans),
    )


def _to_response(tax_year: str, result: CalculationResult) -> CalculationResponse:
    return CalculationResponse(tax_year=tax_year, **result.to_dict())


@app.get("/api/tax-years", response_model=TaxYearsResponse)
def list_tax_years() -> TaxYearsResponse:
    """Return the bundled tax years and their validity intervals."""
    store = default_store()
    summaries = []
    for year in store.tax_years:
        config = store.get_config(year)
        summaries.append(
            TaxYearSummary(
                tax_year=config.tax_year,
                region=str(config.region),
                effective_from=config.effective_from,
                effective_to=config.effective_to,
            )
        )
    return TaxYearsResponse(tax_years=summaries)


@app.post("/api/calculate", response_model=CalculationResponse)
def calculate(request: CalculationRequest) -> CalculationResponse:
    """Compute take-home pay for the supplied inputs.

    The tax year is taken from ``tax_year`` when given, otherwise the year
    in force on ``as_of`` (default: today).
    """
    config = _resolve_config(request)
    try:
        result = calculate_take_home(_to_inputs(request), config)
    except InvalidPlanError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _to_response(config.tax_year, result)


@app.post("/api/compare", response_model=ComparisonResponse)
def compare(request: CalculationRequest) -> ComparisonResponse:
    """Compute take-home pay once per pension type.

    ``pension_type`` in the request is ignored.
    """
    config = _resolve_config(request)
    try:
        results = compare_pension_types(_to_inputs(request), config)
    except InvalidPlanError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ComparisonResponse(
        tax_year=config.tax_year,
        results={k: _to_response(config.tax_year, v) for k, v in results.items()},
    )
