"""POST /v1/projection - rolling forecast of income, fixed commitment and surplus"""

import time
import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from oik_projection.api.dependencies import get_advisory_client, get_current_user_id, get_request_id
from oik_projection.api.v1.schemas import (
    AdvisoryNarrativeSchema,
    CurrentMonthSummarySchema,
    ErrorResponse,
    MonthProjectionSchema,
    ProjectionMetadata,
    ProjectionRequest,
    ProjectionResponse,
)
from oik_projection.config import settings
from oik_projection.domain.exceptions import ComputationFault, DomainException
from oik_projection.domain.narrator import NarrativeGenerator, build_advisory_stats, narrate
from oik_projection.domain.projection import generate_projection
from oik_projection.infrastructure.database.repositories import FamilyRepository, ProjectionInputRepository
from oik_projection.infrastructure.database.session import get_db
from oik_projection.infrastructure.observability.logging import log_projection
from oik_projection.infrastructure.observability.metrics import record_projection

router = APIRouter()


@router.post(
    "/projection",
    response_model=ProjectionResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_projection(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    request_body: Optional[ProjectionRequest] = None,
    db: Session = Depends(get_db),
    advisory_client: Optional[NarrativeGenerator] = Depends(get_advisory_client),
):
    """
    Project the family's next N months.

    Flow:
    1. Validate bearer token with the identity provider (dependency, before the body)
    2. Resolve the caller's family and settings
    3. Load history, recurring items and both installment schedules
    4. Project each month of the horizon
    5. Narrate (AI when enabled, rule-based fallback otherwise)
    6. Return projections, current-month summary and narrative
    """
    start_time = time.time()
    request_id = get_request_id(request)
    body = request_body or ProjectionRequest()

    try:
        # 2. Resolve family (FamilyResolutionError propagates as 404)
        context = FamilyRepository(db).resolve_context(user_id)

        # 3. Load inputs
        today = date.today()
        inputs = ProjectionInputRepository(db).load_inputs(context, today, settings.history_window_months)

        # 4. Project horizon
        result = generate_projection(inputs, months=body.months, today=today)

        # 5. Narrate
        stats = build_advisory_stats(result, inputs)
        narrative, narrative_source = await narrate(stats, advisory_client if body.include_ai_tips else None)

        summary = result.current_month_summary
        alert_level = summary.alert_level if summary else None

        # Record metrics and logs
        duration_ms = (time.time() - start_time) * 1000
        record_projection(alert_level, result.income_source, narrative_source)
        log_projection(
            request_id,
            context.family_id,
            body.months,
            alert_level,
            result.income_source,
            narrative_source,
            duration_ms,
        )

        return ProjectionResponse(
            projections=[MonthProjectionSchema.from_domain(p) for p in result.projections],
            current_month_summary=CurrentMonthSummarySchema.from_domain(summary) if summary else None,
            ai_tips=AdvisoryNarrativeSchema.from_domain(narrative),
            metadata=ProjectionMetadata(
                generated_at=datetime.now(timezone.utc).isoformat(),
                months_projected=body.months,
                historical_months=result.baseline.months_observed,
                accounting_regime=context.settings.accounting_regime,
            ),
        )

    except DomainException:
        raise
    except Exception as e:
        logging.error(
            f"Unexpected error: {e}",
            exc_info=True,
            extra={"request_id": request_id, "user_id": user_id},
        )
        raise ComputationFault("Internal server error") from e
