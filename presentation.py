"""Presentation helpers: turn a FinancialAnalysis into ratio cards for the UI.

Pure functions only. Nothing here recomputes a ratio or a verdict; the
numbers come straight from the analysis.
"""

from dataclasses import dataclass
from typing import List, Tuple

from graph.models import FinancialAnalysis

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
    "CNY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
}

PASSING_VERDICTS = ("APPROVED", "SAFE")

# Debt/EBITDA at which the leverage gauge is pinned to the right edge
LEVERAGE_GAUGE_MAX = 4.0

# Explainer tiles on the landing page
ANALYSIS_STEPS: List[Tuple[str, str]] = [
    ("1. Cash Flow", "Can they make monthly payments? (DSCR ≥ 1.25x)"),
    ("2. Leverage", "Is the debt load too high? (Debt/EBITDA < 3.0x)"),
    ("3. Liquidity", "Can they survive short-term? (Current Ratio ≥ 1.2x)"),
    ("4. Solvency", "Do owners have skin in the game? (Debt/Equity ≤ 2.5x)"),
]


@dataclass(frozen=True)
class RatioCard:
    step: str
    title: str
    question: str
    ratio_label: str
    ratio: float
    verdict: str
    benchmark: str
    figures: List[Tuple[str, float]]   # (label, amount) pairs shown as comparison bars
    narrative: str
    gauge: bool = False                # ratio shown on the leverage gauge instead of bars

    @property
    def passed(self) -> bool:
        return self.verdict in PASSING_VERDICTS

    @property
    def needs_review(self) -> bool:
        return self.verdict == "REVIEW"

    @property
    def ratio_display(self) -> str:
        return format_ratio(self.ratio)


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get((currency or "").strip().upper(), "")


def format_currency(value: float, currency: str = "USD") -> str:
    """12345.6, 'USD' → '$12,346'. Unknown codes are appended: '12,346 CHF'."""
    symbol = currency_symbol(currency)
    sign = "-" if value < 0 else ""
    amount = f"{abs(value):,.0f}"
    if symbol:
        return f"{sign}{symbol}{amount}"
    code = (currency or "").strip().upper()
    return f"{sign}{amount} {code}".rstrip()


def format_ratio(value: float) -> str:
    return f"{value:.2f}x"


def leverage_gauge_position(debt_to_ebitda: float) -> float:
    """Marker position on the 0–4x leverage gauge, as a percentage in [0, 100]."""
    return max(0.0, min(debt_to_ebitda / LEVERAGE_GAUGE_MAX * 100, 100.0))


def bar_fractions(figures: List[Tuple[str, float]]) -> List[Tuple[str, float]]:
    """Scale amounts against the largest absolute amount so bars fit in [0, 1]."""
    largest = max((abs(value) for _, value in figures), default=0.0)
    if largest == 0:
        return [(label, 0.0) for label, _ in figures]
    return [(label, abs(value) / largest) for label, value in figures]


def build_ratio_cards(analysis: FinancialAnalysis) -> List[RatioCard]:
    """The four result cards, in analysis order."""
    symbol = currency_symbol(analysis.currency) or "$"
    return [
        RatioCard(
            step="Step 1",
            title="Repayment Capacity",
            question="Can they make the monthly payments?",
            ratio_label="DSCR",
            ratio=analysis.dscr,
            verdict=analysis.dscr_verdict,
            benchmark="Target ≥ 1.25x",
            figures=[("Cash Flow", analysis.operating_cash_flow), ("Debt Service", analysis.total_debt_service)],
            narrative=f"Generates {symbol}{analysis.dscr:.2f} for every {symbol}1.00 of debt payment.",
        ),
        RatioCard(
            step="Step 2",
            title="Debt Load",
            question="Is the company borrowing more than it is worth?",
            ratio_label="Debt / EBITDA",
            ratio=analysis.debt_to_ebitda,
            verdict=analysis.leverage_verdict,
            benchmark="Target < 3.0x",
            figures=[("Funded Debt", analysis.funded_debt), ("EBITDA", analysis.ebitda)],
            narrative=f"Takes {analysis.debt_to_ebitda:.1f} years to pay off debt.",
            gauge=True,
        ),
        RatioCard(
            step="Step 3",
            title="Liquidity",
            question="Can they pay their bills if a client pays late?",
            ratio_label="Current Ratio",
            ratio=analysis.current_ratio,
            verdict=analysis.liquidity_verdict,
            benchmark="Target ≥ 1.2x",
            figures=[("Current Assets", analysis.current_assets), ("Current Liab.", analysis.current_liabilities)],
            narrative=f"Has {symbol}{analysis.current_ratio:.2f} in assets for every {symbol}1 of bills due.",
        ),
        RatioCard(
            step="Step 4",
            title="Solvency",
            question="Do the owners have skin in the game?",
            ratio_label="Debt / Equity",
            ratio=analysis.debt_to_equity,
            verdict=analysis.solvency_verdict,
            benchmark="Target ≤ 2.5x",
            figures=[("Total Equity", analysis.total_equity), ("Total Liab.", analysis.total_liabilities)],
            narrative=f"For every {symbol}1 of owner money, they owe {symbol}{analysis.debt_to_equity:.2f} to others.",
        ),
    ]
