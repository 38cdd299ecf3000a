"""Advisory narrative - AI-generated when available, rule-based otherwise"""

import json
import logging
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Tuple

from oik_projection.domain.commitment import determine_alert_level
from oik_projection.domain.exceptions import AdvisoryGenerationError
from oik_projection.domain.models import AdvisoryNarrative
from oik_projection.domain.projection import ProjectionInputs, ProjectionResult

logger = logging.getLogger(__name__)

STATS_WINDOW_MONTHS = 6
PREVIEW_MONTHS = 3
TOP_CATEGORIES = 5

FALLBACK_TIPS = [
    "Revise seus gastos fixos mensalmente",
    "Tente manter uma reserva de emergência",
    "Acompanhe suas parcelas de cartão",
]
FALLBACK_RECOMMENDATION = "Continue acompanhando suas finanças regularmente"
FALLBACK_ALERTS = {
    "critical": "Mais de 80% da sua renda está comprometida com despesas fixas e parcelas neste mês.",
    "warning": "Mais de 60% da sua renda está comprometida com despesas fixas e parcelas neste mês.",
}

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class NarrativeGenerator(Protocol):
    async def generate(self, stats: Dict[str, Any]) -> AdvisoryNarrative: ...


def _money(value: Decimal) -> int:
    return int(value.to_integral_value())


def build_advisory_stats(result: ProjectionResult, inputs: ProjectionInputs) -> Dict[str, Any]:
    """
    Aggregate, non-identifying statistics sent to the advisory generator.

    Commitment average covers the first six projected months; the preview
    covers the first three.
    """
    baseline = result.baseline
    projections = result.projections
    window = projections[:STATS_WINDOW_MONTHS]

    avg_commitment = (
        sum((p.fixed_commitment_percentage for p in window), Decimal("0")) / len(window) if window else Decimal("0")
    )
    savings_rate = (
        _money((baseline.avg_income - baseline.avg_expense) / baseline.avg_income * 100)
        if baseline.avg_income > 0
        else 0
    )

    grouped = {p.group.id if p.group else f"row-{i}" for i, p in enumerate(inputs.planned_installments)}

    top_categories: List[Dict[str, Any]] = sorted(
        (
            {"category": category, "avgAmount": _money(sum(amounts, Decimal("0")) / len(amounts))}
            for category, amounts in baseline.expense_by_category.items()
        ),
        key=lambda item: item["avgAmount"],
        reverse=True,
    )[:TOP_CATEGORIES]

    return {
        "avgMonthlyIncome": _money(baseline.avg_income),
        "avgMonthlyExpense": _money(baseline.avg_expense),
        "savingsRate": savings_rate,
        "currentCommitmentPercentage": (
            float(projections[0].fixed_commitment_percentage) if projections else None
        ),
        "avgCommitmentPercentage": float(round(avg_commitment, 2)),
        "activeInstallments": len(inputs.legacy_installments) + len(grouped),
        "activeRecurring": len(inputs.recurring),
        "negativeSurplusMonths": sum(1 for p in projections if p.projected_surplus < 0),
        "nextMonths": [
            {
                "month": p.month_label,
                "surplus": float(p.projected_surplus),
                "commitmentPercentage": float(p.fixed_commitment_percentage),
            }
            for p in projections[:PREVIEW_MONTHS]
        ],
        "topCategories": top_categories,
    }


def parse_narrative(content: str) -> AdvisoryNarrative:
    """
    Extract the JSON object embedded in model output and check its shape.

    Raises:
        AdvisoryGenerationError: No object found, invalid JSON, or wrong shape
    """
    match = _JSON_OBJECT.search(content or "")
    if not match:
        raise AdvisoryGenerationError("No JSON object in advisory response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AdvisoryGenerationError(f"Unparseable advisory JSON: {e}") from e

    if not isinstance(data, dict):
        raise AdvisoryGenerationError("Advisory response is not an object")

    tips = data.get("tips")
    alert = data.get("alert")
    recommendation = data.get("recommendation")

    if not isinstance(tips, list) or not tips or not all(isinstance(t, str) and t.strip() for t in tips):
        raise AdvisoryGenerationError("Advisory 'tips' must be a non-empty list of strings")
    if alert is not None and not isinstance(alert, str):
        raise AdvisoryGenerationError("Advisory 'alert' must be a string or null")
    if not isinstance(recommendation, str) or not recommendation.strip():
        raise AdvisoryGenerationError("Advisory 'recommendation' must be a non-empty string")

    return AdvisoryNarrative(tips=tips, alert=alert or None, recommendation=recommendation)


class RuleBasedNarrator:
    """Deterministic narrative keyed on the current month's commitment only"""

    async def generate(self, stats: Dict[str, Any]) -> AdvisoryNarrative:
        return self.build(stats)

    def build(self, stats: Dict[str, Any]) -> AdvisoryNarrative:
        current = stats.get("currentCommitmentPercentage")
        alert = None
        if current is not None:
            alert = FALLBACK_ALERTS.get(determine_alert_level(Decimal(str(current))))
        return AdvisoryNarrative(
            tips=list(FALLBACK_TIPS),
            alert=alert,
            recommendation=FALLBACK_RECOMMENDATION,
        )


async def narrate(
    stats: Dict[str, Any],
    generator: Optional[NarrativeGenerator],
) -> Tuple[AdvisoryNarrative, str]:
    """
    Try the advisory generator, fall back to the rule-based narrative.

    A `None` generator means the AI path is disabled or not configured.

    Returns: (narrative, source) where source is "ai" or "fallback"
    """
    fallback = RuleBasedNarrator()
    if generator is None:
        return fallback.build(stats), "fallback"

    try:
        return await generator.generate(stats), "ai"
    except AdvisoryGenerationError as e:
        logger.warning(f"Advisory generation failed, using fallback: {e}")
        return fallback.build(stats), "fallback"
    except Exception as e:
        logger.error(f"Unexpected advisory error, using fallback: {e}", exc_info=True)
        return fallback.build(stats), "fallback"
