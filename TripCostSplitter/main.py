"""
TripCostSplitter - FastAPI Web Backend

This module serves as the HTTP entry point for the trip cost splitting
engine using FastAPI.

Features:
    - Balances per participant or family
    - Optimal settlement plan, PDF and spreadsheet export
    - Analytics, cost breakdowns and transaction history

The API is stateless: every request carries the full trip payload
(configuration, participants, families, expenses, settlements) and results
are recomputed from it.

Endpoints:
    POST /balances                              - Balance calculation
    POST /settlement-plan                       - Balances and payment plan
    POST /settlement-plan/pdf                   - Payment plan as PDF
    POST /export/xlsx                           - Trip workbook download
    POST /analytics                             - Spending analytics
    POST /explanations                          - Per-entity cost breakdowns
    POST /participants/{participant_id}/history - One participant's feed
    GET  /health                                - Health check

Usage:
    uvicorn main:app --reload
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

from analytics import generate_analytics
from config.logging_config import configure_logging
from config.trip_config import TripConfig, normalize_currency_code
from expenses import VALID_CATEGORIES, Distribution, Expense
from history import build_transaction_history
from participants import Family, Participant
from payments import Settlement
from report import export_settlement_plan_pdf, report_filename
from settlement import calculate_optimal_settlement
from splitter import calculate_balances
from spreadsheet import export_trip_workbook, workbook_filename
from utils import explain_all_entities

configure_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for Request/Response Validation
# =============================================================================

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class ParticipantIn(BaseModel):
    """Participant record."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    is_adult: bool = True
    family_id: Optional[str] = None


class FamilyIn(BaseModel):
    """Family record."""
    id: str = Field(..., min_length=1)
    family_name: str = Field(..., min_length=1)
    adults: int = Field(0, ge=0)
    children: int = Field(0, ge=0)


class ExpenseIn(BaseModel):
    """Expense record."""
    id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Expense amount (must be > 0)")
    currency: str = Field(..., min_length=3, max_length=3)
    paid_by: str = Field(..., min_length=1, description="Participant ID of payer")
    distribution: Distribution
    category: str = Field("Other", description="Expense category")
    expense_date: str = Field(..., pattern=DATE_PATTERN, description="Expense date (YYYY-MM-DD)")
    description: str = ""
    comment: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return normalize_currency_code(value)


class SettlementIn(BaseModel):
    """Recorded payment between two participants."""
    id: str = Field(..., min_length=1)
    from_participant_id: str = Field(..., min_length=1)
    to_participant_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    currency: str = Field(..., min_length=3, max_length=3)
    settlement_date: str = ""
    note: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return normalize_currency_code(value)


class TripPayload(BaseModel):
    """Everything the engine needs for one trip."""
    name: Optional[str] = Field(None, description="Optional trip name")
    trip: TripConfig = Field(default_factory=TripConfig)
    participants: list[ParticipantIn] = Field(default_factory=list)
    families: list[FamilyIn] = Field(default_factory=list)
    expenses: list[ExpenseIn] = Field(default_factory=list)
    settlements: list[SettlementIn] = Field(default_factory=list)


class BalanceOut(BaseModel):
    id: str
    name: str
    total_paid: float
    total_share: float
    balance: float
    is_family: bool


class BalanceCalculationResponse(BaseModel):
    """Response model for balance calculation."""
    balances: list[BalanceOut]
    total_expenses: float
    suggested_next_payer: Optional[BalanceOut]
    warnings: list[str]


class TransactionOut(BaseModel):
    from_id: str
    from_name: str
    to_id: str
    to_name: str
    amount: float
    is_from_family: bool
    is_to_family: bool


class SettlementPlanResponse(BaseModel):
    """Response model for the settlement plan."""
    balances: list[BalanceOut]
    total_expenses: float
    transactions: list[TransactionOut]
    total_transactions: int
    currency: str
    warnings: list[str]


class AnalyticsResponse(BaseModel):
    """Response model for analytics."""
    category_breakdown: dict
    daily_spending: dict
    highest_spending_day: dict
    payer_totals: dict
    top_expenses: list
    total_spent: float


class ExplanationsResponse(BaseModel):
    """Response model for cost breakdowns."""
    explanations: list


class HistoryResponse(BaseModel):
    """Response model for a participant's transaction feed."""
    participant_id: str
    items: list


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Trip Cost Splitter",
    description="Shared trip costs split per participant or family, settled in as few payments as possible",
    version="1.0.0"
)


# =============================================================================
# Helper Functions
# =============================================================================

def _validate_categories(payload: TripPayload) -> None:
    """Reject expenses whose category is not recognised."""
    for expense in payload.expenses:
        if expense.category not in VALID_CATEGORIES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid category '{expense.category}'. Must be one of: {sorted(VALID_CATEGORIES)}"
            )


def _to_engine_records(payload: TripPayload) -> tuple[list, list, list, list]:
    """Convert request models into engine records."""
    _validate_categories(payload)
    expenses = [Expense.from_dict(e.model_dump()) for e in payload.expenses]
    participants = [Participant.from_dict(p.model_dump()) for p in payload.participants]
    families = [Family.from_dict(f.model_dump()) for f in payload.families]
    settlements = [Settlement.from_dict(s.model_dump()) for s in payload.settlements]
    return expenses, participants, families, settlements


def _calculate(payload: TripPayload) -> tuple[dict, tuple]:
    records = _to_engine_records(payload)
    expenses, participants, families, settlements = records
    config = payload.trip

    result = calculate_balances(
        expenses,
        participants,
        families,
        config.tracking_mode,
        settlements,
        config.default_currency,
        config.exchange_rates
    )
    logger.info(
        "Calculated %d balances from %d expenses and %d settlements (%d warnings)",
        len(result["balances"]), len(expenses), len(settlements), len(result["warnings"])
    )
    return result, records


# =============================================================================
# API Endpoints
# =============================================================================

@app.post("/balances", response_model=BalanceCalculationResponse)
async def trip_balances(payload: TripPayload):
    """
    Calculate balances for a trip.

    Request flow:
        1. Validate payload using Pydantic models
        2. Calculate balances (splitter.py)
        3. Return balances, totals, suggested next payer and warnings
    """
    try:
        result, _ = _calculate(payload)
        return BalanceCalculationResponse(**result)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Balance calculation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/settlement-plan", response_model=SettlementPlanResponse)
async def trip_settlement_plan(payload: TripPayload):
    """
    Calculate balances and the payments that settle them.

    Request flow:
        1. Calculate balances (splitter.py)
        2. Optimize settlements (settlement.py)
        3. Return balances and the payment plan
    """
    try:
        result, _ = _calculate(payload)
        plan = calculate_optimal_settlement(result["balances"], payload.trip.default_currency)

        return SettlementPlanResponse(
            balances=result["balances"],
            total_expenses=result["total_expenses"],
            transactions=plan["transactions"],
            total_transactions=plan["total_transactions"],
            currency=plan["currency"],
            warnings=result["warnings"]
        )

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Settlement plan calculation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/settlement-plan/pdf")
async def trip_settlement_plan_pdf(payload: TripPayload):
    """Download the settlement plan as a PDF report."""
    try:
        result, _ = _calculate(payload)
        plan = calculate_optimal_settlement(result["balances"], payload.trip.default_currency)
        trip_name = payload.name or "Trip"
        pdf = export_settlement_plan_pdf(trip_name, plan, result["balances"])

        return Response(
            content=pdf,
            media_type="application/pdf",
            headers={"Content-Disposition": f"attachment; filename={report_filename(trip_name)}"}
        )

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Settlement plan PDF export failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/export/xlsx")
async def trip_workbook(payload: TripPayload):
    """Download expenses, balances and settlements as an Excel workbook."""
    try:
        result, (expenses, participants, families, settlements) = _calculate(payload)
        config = payload.trip
        trip_name = payload.name or "Trip"
        workbook = export_trip_workbook(
            trip_name,
            config.tracking_mode,
            expenses,
            participants,
            families,
            result["balances"],
            settlements,
            config.default_currency,
            config.exchange_rates
        )

        return Response(
            content=workbook,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={workbook_filename(trip_name)}"}
        )

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Workbook export failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/analytics", response_model=AnalyticsResponse)
async def trip_analytics(payload: TripPayload):
    """Spending analytics in the trip's base currency."""
    try:
        expenses, participants, _, _ = _to_engine_records(payload)
        config = payload.trip
        return AnalyticsResponse(**generate_analytics(
            expenses,
            participants,
            config.tracking_mode,
            config.default_currency,
            config.exchange_rates
        ))

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Analytics generation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/explanations", response_model=ExplanationsResponse)
async def trip_explanations(payload: TripPayload):
    """What each entity paid and what its share of every expense is."""
    try:
        result, (expenses, participants, families, _) = _calculate(payload)
        config = payload.trip
        explanations = explain_all_entities(
            result["balances"],
            expenses,
            participants,
            families,
            config.tracking_mode,
            config.default_currency,
            config.exchange_rates
        )
        return ExplanationsResponse(explanations=explanations)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Explanation generation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/participants/{participant_id}/history", response_model=HistoryResponse)
async def participant_history(participant_id: str, payload: TripPayload):
    """One participant's expenses and settlements, newest first."""
    try:
        expenses, participants, families, settlements = _to_engine_records(payload)
        if not any(p.id == participant_id for p in participants):
            raise HTTPException(status_code=404, detail=f"Participant {participant_id} not found")

        items = build_transaction_history(
            expenses,
            settlements,
            participants,
            families,
            participant_id,
            payload.trip.tracking_mode
        )
        return HistoryResponse(participant_id=participant_id, items=items)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("History generation failed")
        raise HTTPException(status_code=500, detail=str(e))


# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint to verify API is running."""
    return {"status": "healthy", "service": "Trip Cost Splitter"}


# =============================================================================
# Run with: python main.py
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
