"""The OR-of-AND request evaluator."""

from __future__ import annotations

import logging
import time

from starlette.requests import Request

from fastapi_oas3._types import RequestEvaluator
from fastapi_oas3.security.handlers import (
    ALLOW,
    FORBIDDEN,
    UNAUTHORIZED,
    HandlerResult,
)
from fastapi_oas3.security.plan import SecurityPlan
from fastapi_oas3.trace import SecurityTrace, TraceEntry

logger = logging.getLogger(__name__)


def most_specific_failure(failures: list[HandlerResult]) -> HandlerResult:
    """403 outranks 401: a known-but-refused caller beats an unknown one."""
    if any(result.code == 403 for result in failures):
        return FORBIDDEN
    return UNAUTHORIZED


def build_security_evaluator(plan: SecurityPlan) -> RequestEvaluator:
    """Return ``evaluate(request) -> HandlerResult`` for ``plan``.

    Clauses run in declaration order and so do the schemes inside each
    clause, one at a time. A clause stops at its first failure; the first
    clause whose schemes all pass allows the request and later clauses never
    run. If every clause fails, the failures collected on the way decide
    between 403 and 401. A plan without clauses allows everything.
    """

    async def evaluate(request: Request) -> HandlerResult:
        if not plan.clauses:
            return ALLOW

        trace = SecurityTrace() if plan.debug else None
        started = time.perf_counter()
        failures: list[HandlerResult] = []
        decision: HandlerResult | None = None

        for clause_index, clause in enumerate(plan.clauses):
            logger.debug(
                "Checking security handler group.",
                extra={"handler_group_index": clause_index},
            )
            clause_failed = False

            for handler_index, (name, handler) in enumerate(clause):
                handler_started = time.perf_counter()
                try:
                    result = await handler(request)
                except Exception:
                    logger.error(
                        "Security handler '%s' raised.",
                        name,
                        exc_info=True,
                        extra={"handler_group_index": clause_index},
                    )
                    result = UNAUTHORIZED

                if trace is not None:
                    trace.entries.append(
                        TraceEntry(
                            clause_index=clause_index,
                            scheme_name=name,
                            duration_ms=(time.perf_counter() - handler_started) * 1000,
                            outcome="OK" if result.ok else "FAILED",
                            code=result.code,
                        )
                    )

                if not result.ok:
                    logger.debug(
                        "Security scheme denied request.",
                        extra={
                            "handler_group_index": clause_index,
                            "handler_index": handler_index,
                            "security_scheme": name,
                        },
                    )
                    failures.append(result)
                    clause_failed = True
                    break

            if not clause_failed:
                logger.debug("At least one set of security handlers succeeded.")
                decision = ALLOW
                break

        if decision is None:
            logger.debug("All security handlers failed for route.")
            decision = most_specific_failure(failures)

        if trace is not None:
            trace.total_duration_ms = (time.perf_counter() - started) * 1000
            trace.outcome = "OK" if decision.ok else "DENIED"
            trace.code = decision.code
            request.state.security_trace = trace

        return decision

    evaluate._security_plan = plan  # type: ignore[attr-defined]
    return evaluate
