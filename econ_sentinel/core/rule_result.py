"""Rule Results — the uniform output contract for sanity, audit and admin rules.

Invariants:
    - Rule failures are DATA, never exceptions: callers branch on passed/ok
    - A passing RuleResult always has severity LOW; details may carry a soft warning
    - RuleResult.blocking is True only for failed HIGH-severity results

Design Decisions:
    - Frozen dataclasses: results are appended to accumulators, never mutated
    - SanityResult kept separate ({ok, reason}): predicates are composed by callers
      and adapted to RuleResult only where a severity is assigned (sentinel_rules)
"""

from dataclasses import dataclass

from econ_sentinel.core.domain_types import RuleSeverity
from econ_sentinel.core.economy_calculator import RewardPair
from econ_sentinel.core.economy_state import UserEconomyState

_SEVERITY_ORDER = {
    RuleSeverity.LOW: 0,
    RuleSeverity.MEDIUM: 1,
    RuleSeverity.HIGH: 2,
}


@dataclass(frozen=True)
class RuleResult:
    rule: str
    passed: bool
    severity: RuleSeverity = RuleSeverity.LOW
    details: str = ""

    @property
    def blocking(self) -> bool:
        return not self.passed and self.severity == RuleSeverity.HIGH

    def to_dict(self) -> dict:
        return {
            "rule": self.rule,
            "passed": self.passed,
            "severity": self.severity.value,
            "details": self.details,
        }


@dataclass(frozen=True)
class SanityResult:
    ok: bool
    reason: str | None = None


@dataclass(frozen=True)
class HealResult:
    fixed: bool
    message: str | None = None
    user: UserEconomyState | None = None
    reward: RewardPair | None = None


SANITY_OK = SanityResult(ok=True)


def passed(rule: str, details: str = "") -> RuleResult:
    return RuleResult(rule=rule, passed=True, severity=RuleSeverity.LOW, details=details)


def failed(rule: str, severity: RuleSeverity, details: str) -> RuleResult:
    return RuleResult(rule=rule, passed=False, severity=severity, details=details)


def worst_severity(results: list[RuleResult]) -> RuleSeverity:
    """Highest severity among FAILED results; LOW when nothing failed."""
    worst = RuleSeverity.LOW
    for result in results:
        if not result.passed and _SEVERITY_ORDER[result.severity] > _SEVERITY_ORDER[worst]:
            worst = result.severity
    return worst
