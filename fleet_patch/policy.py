"""Version qualification policy.

Decides whether a pinned version should be rewritten. Two modes exist and
are kept as separate functions because they ask different questions:

- target-version: "is current != target, and at or above the optional floor?"
- minimum-as-target: "is current strictly below the minimum?" (the minimum is
  also where the pin is moved to)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .models import PatchTarget, PolicyMode, QualificationResult
from .versions import Version, equal, greater_than, less_than


def qualify_for_target(
    current: Version,
    target: Version,
    minimum: Version | None = None,
    require_major_match: bool = False,
) -> QualificationResult:
    """Qualify a pin for rewriting to an explicit target.

    First match wins:
    1. current == target → ALREADY_AT_TARGET
    2. minimum given and current < minimum → BELOW_MINIMUM
    3. require_major_match and major(current) != major(gate) → MAJOR_MISMATCH,
       where the gate is the minimum when given, otherwise the target
    4. otherwise → QUALIFIED
    """
    if equal(current, target):
        return QualificationResult.ALREADY_AT_TARGET
    if minimum is not None and less_than(current, minimum):
        return QualificationResult.BELOW_MINIMUM
    if require_major_match:
        gate = minimum if minimum is not None else target
        if current.major != gate.major:
            return QualificationResult.MAJOR_MISMATCH
    return QualificationResult.QUALIFIED


def qualify_for_minimum(
    current: Version,
    minimum: Version,
    require_major_match: bool = False,
) -> QualificationResult:
    """Qualify a pin for raising to the minimum version.

    First match wins:
    1. current == minimum → ALREADY_AT_TARGET
    2. current > minimum → ALREADY_SATISFIED
    3. require_major_match and major(current) != major(minimum) → MAJOR_MISMATCH
    4. otherwise (current < minimum) → QUALIFIED
    """
    if equal(current, minimum):
        return QualificationResult.ALREADY_AT_TARGET
    if greater_than(current, minimum):
        return QualificationResult.ALREADY_SATISFIED
    # The major gate is read from the minimum, never from the current pin.
    if require_major_match and current.major != minimum.major:
        return QualificationResult.MAJOR_MISMATCH
    return QualificationResult.QUALIFIED


class PatchPolicy(BaseModel):
    """Run-wide qualification settings.

    Attributes:
        mode: Which qualification question to ask.
        minimum: Optional floor for TARGET_VERSION mode. Ignored in
                 MINIMUM_AS_TARGET mode, where each PatchTarget's version
                 is the minimum.
        require_major_match: Reject pins whose major version differs from
                             the gate version.
    """

    model_config = ConfigDict(frozen=True)

    mode: PolicyMode = PolicyMode.TARGET_VERSION
    minimum: str | None = None
    require_major_match: bool = False

    def qualify(self, current: str, target: PatchTarget) -> QualificationResult:
        """Evaluate the pinned version `current` against one work item."""
        if self.mode is PolicyMode.MINIMUM_AS_TARGET:
            return qualify_for_minimum(
                Version(current), Version(target.version), self.require_major_match
            )
        return qualify_for_target(
            Version(current),
            Version(target.version),
            Version(self.minimum) if self.minimum else None,
            self.require_major_match,
        )

    def describe(self) -> str:
        """One-line summary used in run headers and pull-request bodies."""
        if self.mode is PolicyMode.MINIMUM_AS_TARGET:
            text = "raise pins below the minimum to the minimum"
        elif self.minimum:
            text = f"qualified package >= {self.minimum}"
        else:
            text = "no minimum version restriction"
        if self.require_major_match:
            text += ", same major version only"
        return text
