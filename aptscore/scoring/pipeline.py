"""Composable, conditionally-gated scoring pipelines.

A pipeline is a list of steps. Steps run in ascending priority order and
each contributes a partial score to a running total. A step may carry a
predicate; the predicate sees only the running total so far (as a frozen
``RunningResult``) and decides whether the step runs at all.

Example:
    pipeline = CalculationPipeline(
        name="commuter",
        steps=[
            CalculationStep(
                name="base",
                priority=1,
                calculator=lambda scores, weights: to_real(
                    scores[Factor.DISTANCE_TO_STATION]
                ) * 0.8,
            ),
            CalculationStep(
                name="transport_bonus",
                priority=2,
                condition=total_above(60.0),
                calculator=lambda scores, weights: 5.0,
            ),
        ],
    )
    result = calculate_with_pipeline(scores, weights, pipeline)
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from aptscore.core.fixed_point import WEIGHT_SCALE, ScoreValue, Weight, to_real
from aptscore.core.logging import get_logger
from aptscore.factors import Factor
from aptscore.scoring.models import PIPELINE_STRATEGY, ScoreResult
from aptscore.scoring.strategies import validate_scores
from aptscore.scoring.weights import validate_weight_range

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunningResult:
    """Snapshot handed to step predicates: the total accumulated so far."""

    total_score: float = 0.0


StepCondition = Callable[[RunningResult], bool]
StepCalculator = Callable[[Mapping[Factor, ScoreValue], Mapping[Factor, Weight]], float]


@dataclass(frozen=True)
class CalculationStep:
    """One stage of a calculation pipeline.

    Attributes:
        name: Step name, recorded on the result when the step runs.
        calculator: Returns the step's partial contribution (0-100 scale).
        priority: Execution order, lowest first.
        condition: Optional predicate over the running result.
        description: Free-form explanation.
    """

    name: str
    calculator: StepCalculator
    priority: int = 0
    condition: StepCondition | None = None
    description: str = ""

    def should_run(self, running: RunningResult) -> bool:
        """Return True if the step has no condition or its condition holds."""
        return self.condition is None or bool(self.condition(running))


@dataclass
class CalculationPipeline:
    """Named, ordered collection of calculation steps."""

    name: str
    steps: list[CalculationStep] = field(default_factory=list)
    description: str = ""

    def add_step(self, step: CalculationStep) -> "CalculationPipeline":
        """Append a step and return the pipeline for chaining."""
        self.steps.append(step)
        return self

    def ordered_steps(self) -> list[CalculationStep]:
        """Return steps sorted by priority; equal priorities keep their order."""
        return sorted(self.steps, key=lambda step: step.priority)


def total_above(threshold: float) -> StepCondition:
    """Predicate: running total strictly above ``threshold``."""

    def condition(running: RunningResult) -> bool:
        return running.total_score > threshold

    return condition


def total_below(threshold: float) -> StepCondition:
    """Predicate: running total strictly below ``threshold``."""

    def condition(running: RunningResult) -> bool:
        return running.total_score < threshold

    return condition


def calculate_with_pipeline(
    scores: Mapping[Factor, ScoreValue],
    weights: Mapping[Factor, Weight],
    pipeline: CalculationPipeline,
) -> ScoreResult:
    """Run a calculation pipeline over one entity's scores.

    Steps whose predicate is False are skipped entirely. Each weight must lie
    in [0, WEIGHT_SCALE], but the set need not sum to WEIGHT_SCALE; pipelines
    decide for themselves how (or whether) to use them.

    Args:
        scores: Factor to scaled score mapping.
        weights: Factor to scaled weight mapping.
        pipeline: Pipeline definition.

    Returns:
        ScoreResult with strategy "pipeline" and the applied step names.

    Raises:
        ValidationError: If a score or weight is out of range.
    """
    validate_scores(scores)
    validate_weight_range(weights)

    total = 0.0
    applied: list[str] = []
    for step in pipeline.ordered_steps():
        if not step.should_run(RunningResult(total_score=total)):
            logger.debug(
                "pipeline_step_skipped", pipeline=pipeline.name, step=step.name
            )
            continue
        contribution = float(step.calculator(scores, weights))
        total += contribution
        applied.append(step.name)
        logger.debug(
            "pipeline_step_applied",
            pipeline=pipeline.name,
            step=step.name,
            contribution=contribution,
            running_total=total,
        )

    return ScoreResult(
        total_score=total,
        raw_scores={f: to_real(scores.get(f, 0)) for f in Factor},
        weights={f: to_real(weights.get(f, 0), WEIGHT_SCALE) for f in Factor},
        weighted_scores={},
        strategy=PIPELINE_STRATEGY,
        pipeline_name=pipeline.name,
        steps_applied=applied,
    )


def _school_priority(
    scores: Mapping[Factor, ScoreValue], weights: Mapping[Factor, Weight]
) -> float:
    return to_real(scores.get(Factor.SCHOOL_DISTRICT, 0)) * 0.4


def _size_fee_balance(
    scores: Mapping[Factor, ScoreValue], weights: Mapping[Factor, Weight]
) -> float:
    size = to_real(scores.get(Factor.APARTMENT_SIZE, 0)) * 0.6
    fee = to_real(scores.get(Factor.MAINTENANCE_FEE, 0)) * 0.4
    return (size + fee) * 0.4


def _transport_bonus(
    scores: Mapping[Factor, ScoreValue], weights: Mapping[Factor, Weight]
) -> float:
    transport = to_real(scores.get(Factor.TRANSPORTATION_ACCESS, 0))
    if transport >= 85:
        return 5 * 0.2
    elif transport >= 75:
        return 2 * 0.2
    return 0.0


def family_pipeline() -> CalculationPipeline:
    """Family-oriented pipeline.

    School district counts 40%, the size/fee balance 40%, and a small
    transport bonus is awarded only once the base score exceeds 60.
    """
    return CalculationPipeline(
        name="family",
        description="School district, size/fee balance and transport access",
        steps=[
            CalculationStep(
                name="school_priority",
                description="School district score at 40%",
                priority=1,
                calculator=_school_priority,
            ),
            CalculationStep(
                name="size_fee_balance",
                description="Apartment size and maintenance fee balance at 40%",
                priority=2,
                calculator=_size_fee_balance,
            ),
            CalculationStep(
                name="transport_bonus",
                description="Bonus for good transport when the base exceeds 60",
                priority=3,
                condition=total_above(60.0),
                calculator=_transport_bonus,
            ),
        ],
    )
