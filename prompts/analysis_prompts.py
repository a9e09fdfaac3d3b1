"""LLM prompt and response schema for the four-step credit analysis.

Sent to Gemini together with the uploaded statement. The schema is the
structured-output contract; its field names match the camelCase JSON
aliases of ``graph.models.FinancialAnalysis``.
"""

ANALYSIS_PROMPT = """Perform a comprehensive credit analysis on this financial statement for a banker.

STEP 1: Verify Repayment Capacity (Cash Flow)
- Goal: "Can they make the monthly payments?"
- Calculate DSCR = Net Operating Cash Flow / Total Debt Service.
- Benchmark: DSCR >= 1.25 is APPROVED. Below is REJECTED.

STEP 2: Measure Total Debt Load (Leverage)
- Goal: "Is the company borrowing more than it is worth?"
- Calculate Funded Debt to EBITDA = Total Interest Bearing Debt / EBITDA.
- Benchmark: Ratio < 3.0x is SAFE. Ratio >= 3.0x is RISKY.
- Note: Funded Debt = Short Term Debt + Long Term Debt.

STEP 3: Assess Short-Term Survival (Liquidity)
- Goal: "Can they pay their bills if a client pays late?"
- Calculate Current Ratio = Current Assets / Current Liabilities.
- Benchmark: Ratio >= 1.2x is SAFE. Below is RISKY.

STEP 4: Confirm Owner Commitment (Solvency)
- Goal: "Do the owners have skin in the game?"
- Calculate Debt-to-Equity Ratio = Total Liabilities / Total Equity.
- Benchmark: Ratio <= 2.5x is SAFE. Ratio > 2.5x is RISKY.

Use REVIEW for any verdict the statement does not contain enough data to decide.
Provide a strict verdict for all four steps."""


def _number(description: str) -> dict:
    return {"type": "number", "description": description}


def _verdict(options: list[str], description: str) -> dict:
    return {"type": "string", "enum": options, "description": description}


RISK_VERDICTS = ["SAFE", "RISKY", "REVIEW"]

ANALYSIS_SCHEMA: dict = {
    "type": "object",
    "properties": {
        # Step 1: DSCR
        "operatingCashFlow": _number("Net Operating Cash Flow."),
        "totalDebtService": _number("Total annual debt service (Principal + Interest)."),
        "dscr": _number("Operating Cash Flow / Total Debt Service."),
        "dscrVerdict": _verdict(["APPROVED", "REJECTED", "REVIEW"], "APPROVED if DSCR >= 1.25, REJECTED if < 1.25."),
        # Step 2: Leverage
        "fundedDebt": _number("Total Funded Debt (Short Term Debt + Long Term Debt)."),
        "ebitda": _number("Earnings Before Interest, Taxes, Depreciation, and Amortization."),
        "debtToEbitda": _number("Funded Debt / EBITDA."),
        "leverageVerdict": _verdict(RISK_VERDICTS, "SAFE if Debt/EBITDA < 3.0, RISKY if >= 3.0."),
        # Step 3: Liquidity
        "currentAssets": _number("Total Current Assets."),
        "currentLiabilities": _number("Total Current Liabilities."),
        "currentRatio": _number("Current Assets / Current Liabilities."),
        "liquidityVerdict": _verdict(RISK_VERDICTS, "SAFE if Current Ratio >= 1.2, RISKY if < 1.2."),
        # Step 4: Solvency
        "totalLiabilities": _number("Total Liabilities."),
        "totalEquity": _number("Total Owner's Equity."),
        "debtToEquity": _number("Total Liabilities / Total Equity."),
        "solvencyVerdict": _verdict(RISK_VERDICTS, "SAFE if Debt/Equity <= 2.5, RISKY if > 2.5."),
        # Meta
        "currency": {"type": "string"},
        "period": {"type": "string"},
        "summary": {
            "type": "string",
            "description": "Executive summary covering DSCR, Leverage, Liquidity, and Solvency.",
        },
        "confidenceScore": {"type": "number"},
    },
    "required": [
        "operatingCashFlow",
        "totalDebtService",
        "dscr",
        "dscrVerdict",
        "fundedDebt",
        "ebitda",
        "debtToEbitda",
        "leverageVerdict",
        "currentAssets",
        "currentLiabilities",
        "currentRatio",
        "liquidityVerdict",
        "totalLiabilities",
        "totalEquity",
        "debtToEquity",
        "solvencyVerdict",
        "currency",
        "summary",
        "confidenceScore",
    ],
}
