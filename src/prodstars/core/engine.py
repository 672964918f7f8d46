"""End-to-end evaluation of a scorecard document."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pendulum
import structlog

from ..exceptions import ConfigurationError
from ..schemas import CommunityWeightsFile, Domain, EvalOptions, OverridesFile, ProdStarsDocument
from .dispatcher import EvalDispatcher
from .gate import effective_minimum, evaluate_gate
from .redaction import redact
from .results import CheckOutcome, EvaluationResult
from .risks import RiskRanker
from .scheduler import ConcurrencyScheduler
from .scoring import ScoringEngine
from .weights import ResolvedCheck, WeightResolver

SKIP_MANUAL_DETAIL = "Manual check skipped by request"


class EvaluationEngine:
    """Resolve, run, score and gate every check of a document."""

    def __init__(
        self,
        *,
        dispatcher: EvalDispatcher,
        scheduler: ConcurrencyScheduler,
        resolver: WeightResolver | None = None,
        scoring: ScoringEngine | None = None,
        ranker: RiskRanker | None = None,
        now_provider: Callable[[], Any] | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._scheduler = scheduler
        self._resolver = resolver or WeightResolver()
        self._scoring = scoring or ScoringEngine()
        self._ranker = ranker or RiskRanker()
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    def evaluate(
        self,
        document: ProdStarsDocument,
        *,
        options: EvalOptions | None = None,
        overrides: OverridesFile | None = None,
        community: CommunityWeightsFile | None = None,
    ) -> EvaluationResult:
        """Blocking wrapper around :meth:`evaluate_async`."""
        return asyncio.run(
            self.evaluate_async(
                document,
                options=options,
                overrides=overrides,
                community=community,
            )
        )

    async def evaluate_async(
        self,
        document: ProdStarsDocument,
        *,
        options: EvalOptions | None = None,
        overrides: OverridesFile | None = None,
        community: CommunityWeightsFile | None = None,
    ) -> EvaluationResult:
        options = options or EvalOptions()
        domains = self._select_domains(document, options.domains)
        selected_ids = {domain.id for domain in domains}

        resolved = [
            item
            for item in self._resolver.resolve_document(
                document,
                overrides=overrides,
                community=community,
            )
            if item.domain_id in selected_ids
        ]
        for item in resolved:
            if not item.skip:
                self._dispatcher.validate(item)

        outcomes, runnable = self._presettle(resolved, options)
        schedule = await self._scheduler.run(
            runnable,
            lambda item: self._dispatcher.dispatch(
                item,
                recorded_answer=options.manual_answers.get(item.id),
            ),
            parallel=options.parallel,
            timeout=options.timeout,
        )
        outcomes.update(schedule.outcomes)

        scorecard = self._scoring.score(resolved, outcomes, domains=domains)
        top_risks = self._ranker.rank(
            scorecard.checks,
            {item.id: item.check for item in resolved},
        )
        minimum = effective_minimum(
            fail_under=options.fail_under,
            org_minimum=overrides.minimum_rating if overrides else None,
            document_minimum=document.minimum_rating,
        )
        gate = evaluate_gate(scorecard.rating, minimum)

        result = EvaluationResult(
            schema=document.schema_,
            product=document.product,
            version=document.version,
            evaluated_at=self._now_provider().in_timezone("UTC").to_iso8601_string(),
            rating=scorecard.rating,
            summary=scorecard.summary,
            domains=scorecard.domains,
            top_risks=top_risks,
            checks=scorecard.checks,
            gate=gate,
            timed_out=bool(schedule.timed_out),
        )

        self._logger.info(
            "evaluation.result",
            product=document.product,
            version=document.version,
            stars=result.rating.stars,
            stars_uncapped=result.rating.stars_uncapped,
            capped=result.rating.capped,
            gate_passed=gate.passed,
            minimum_rating=minimum,
            total_checks=result.summary.total_checks,
            timed_out=result.timed_out,
        )
        return result

    @staticmethod
    def _select_domains(document: ProdStarsDocument, requested: list[str]) -> list[Domain]:
        if not requested:
            return list(document.domains)
        known = {domain.id for domain in document.domains}
        unknown = [domain_id for domain_id in requested if domain_id not in known]
        if unknown:
            raise ConfigurationError(f"Unknown domain(s) requested: {', '.join(unknown)}")
        wanted = set(requested)
        return [domain for domain in document.domains if domain.id in wanted]

    @staticmethod
    def _presettle(
        resolved: list[ResolvedCheck],
        options: EvalOptions,
    ) -> tuple[dict[str, CheckOutcome], list[ResolvedCheck]]:
        """Record outcomes for checks that are never run; return the rest."""
        outcomes: dict[str, CheckOutcome] = {}
        runnable: list[ResolvedCheck] = []
        for item in resolved:
            if item.skip:
                outcomes[item.id] = CheckOutcome(status="skip", details=redact(item.skip_reason or ""))
            elif options.skip_manual and item.check.eval.method == "manual":
                outcomes[item.id] = CheckOutcome(status="skip", details=SKIP_MANUAL_DETAIL)
            else:
                runnable.append(item)
        return outcomes, runnable
