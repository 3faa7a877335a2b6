"""
Step Runner - Ordered, best-effort execution of build steps.

Each BuildStep wraps one remote mutation. Steps run strictly in the declared
order, one at a time, because later steps consume side effects of earlier
ones (e.g. the id of a newly created theme).

Outcome per step:
    action returns                -> SUCCEEDED
    action raises ConflictError   -> SKIPPED_EXISTING (resource already there)
    action raises anything else   -> FAILED, and the run continues
    AuthenticationError           -> propagates; the run is aborted

The runner never swallows an error: every failure is kept on its BuildResult.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import AuthenticationError, ConflictError, RemoteApiError


class StepStatus(Enum):
    SUCCEEDED = "succeeded"
    SKIPPED_EXISTING = "skipped_existing"
    FAILED = "failed"


@dataclass
class BuildStep:
    name: str
    action: Callable[[], Any]
    depends_on: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BuildResult:
    step_name: str
    status: StepStatus
    error: Optional[str] = None
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step_name,
            "status": self.status.value,
            "error": self.error,
            "detail": self.detail,
        }


@dataclass
class BuildReport:
    shop: str = ""
    results: List[BuildResult] = field(default_factory=list)
    started_at: str = ""
    completed_at: str = ""

    @property
    def succeeded(self) -> bool:
        return not self.failed_steps

    @property
    def failed_steps(self) -> List[str]:
        return [r.step_name for r in self.results if r.status is StepStatus.FAILED]

    def statuses(self) -> List[StepStatus]:
        return [r.status for r in self.results]

    def result_for(self, step_name: str) -> Optional[BuildResult]:
        for result in self.results:
            if result.step_name == step_name:
                return result
        return None

    def __len__(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shop": self.shop,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "success": self.succeeded,
            "failed_steps": self.failed_steps,
            "results": [r.to_dict() for r in self.results],
        }


class StepItemsFailed(RemoteApiError):
    """Raised by a multi-item step when at least one item failed."""


@dataclass
class ItemOutcome:
    created: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.created) + len(self.existing) + len(self.failed)

    def summary(self) -> str:
        return (
            f"{len(self.created)} created, {len(self.existing)} existing, "
            f"{len(self.failed)} failed"
        )

    def raise_for_outcome(self, label: str) -> str:
        """Turn the tally into the step's outcome.

        Any failed item fails the step; a step where every item already
        existed is reported as SKIPPED_EXISTING. Otherwise returns the summary
        used as the step's detail.
        """
        if self.failed:
            names = ", ".join(f"{k} ({v})" for k, v in self.failed.items())
            raise StepItemsFailed(f"{label}: {self.summary()} - {names}")
        if self.total and not self.created:
            raise ConflictError(f"all {label} already exist", None)
        return self.summary()


def run_idempotent(
    items: Iterable[Any],
    create: Callable[[Any], Any],
    label: Callable[[Any], str],
    debug: bool = False,
) -> ItemOutcome:
    """Create each item in turn, tolerating "already exists" per item.

    AuthenticationError is not tolerated and propagates immediately.
    """
    outcome = ItemOutcome()
    for item in items:
        name = label(item)
        try:
            create(item)
        except ConflictError:
            outcome.existing.append(name)
            print(f"  {name} already exists")
        except AuthenticationError:
            raise
        except RemoteApiError as e:
            outcome.failed[name] = e.message
            print(f"  Error creating {name}: {e.message}")
        else:
            outcome.created.append(name)
            print(f"  Created: {name}")
    if debug:
        print(f"  {outcome.summary()}")
    return outcome


class StepRunner:
    """Runs BuildSteps in order and collects a BuildReport."""

    def __init__(self, debug: bool = False):
        self.debug = debug

    @staticmethod
    def validate(steps: Sequence[BuildStep]):
        """Reject duplicate names and dependencies on steps not declared earlier."""
        seen = set()
        for step in steps:
            if step.name in seen:
                raise ValueError(f"Duplicate build step name: {step.name}")
            for dependency in step.depends_on:
                if dependency not in seen:
                    raise ValueError(
                        f"Step '{step.name}' depends on '{dependency}', "
                        "which is not declared before it"
                    )
            seen.add(step.name)

    def run(self, steps: Sequence[BuildStep], shop: str = "") -> BuildReport:
        self.validate(steps)

        report = BuildReport(shop=shop, started_at=datetime.now(timezone.utc).isoformat())

        for number, step in enumerate(steps, start=1):
            print(f"\n{'='*60}")
            print(f"STEP {number}: {step.name.replace('_', ' ').upper()}")
            print("="*60)
            report.results.append(self._run_step(step))

        report.completed_at = datetime.now(timezone.utc).isoformat()
        return report

    def _run_step(self, step: BuildStep) -> BuildResult:
        try:
            detail = step.action()
        except ConflictError as e:
            print(f"  Already exists, skipping: {e.message}")
            return BuildResult(step.name, StepStatus.SKIPPED_EXISTING, detail=e.message)
        except AuthenticationError:
            raise
        except Exception as e:
            print(f"  ERROR: {e}")
            if self.debug:
                import traceback
                traceback.print_exc()
            return BuildResult(step.name, StepStatus.FAILED, error=str(e))

        print("  Done")
        return BuildResult(
            step.name,
            StepStatus.SUCCEEDED,
            detail=detail if isinstance(detail, str) else None,
        )
