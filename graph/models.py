"""FinancialAnalysis: the typed result of one credit analysis."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, FiniteFloat
from pydantic.alias_generators import to_camel

DscrVerdict = Literal["APPROVED", "REJECTED", "REVIEW"]
RiskVerdict = Literal["SAFE", "RISKY", "REVIEW"]


class FinancialAnalysis(BaseModel):
    """Four ratio blocks plus metadata, exactly as returned by the model.

    JSON keys are camelCase (``debtToEbitda``); attributes are snake_case.
    Strict: a numeric string or an unknown verdict is a validation error.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        frozen=True,
    )

    # Step 1: DSCR (repayment capacity)
    operating_cash_flow: FiniteFloat
    total_debt_service: FiniteFloat
    dscr: FiniteFloat
    dscr_verdict: DscrVerdict

    # Step 2: Leverage (debt load)
    funded_debt: FiniteFloat
    ebitda: FiniteFloat
    debt_to_ebitda: FiniteFloat
    leverage_verdict: RiskVerdict

    # Step 3: Liquidity (short-term survival)
    current_assets: FiniteFloat
    current_liabilities: FiniteFloat
    current_ratio: FiniteFloat
    liquidity_verdict: RiskVerdict

    # Step 4: Solvency (owner commitment)
    total_liabilities: FiniteFloat
    total_equity: FiniteFloat
    debt_to_equity: FiniteFloat
    solvency_verdict: RiskVerdict

    # Meta
    currency: str
    period: Optional[str] = None
    summary: str
    confidence_score: FiniteFloat
