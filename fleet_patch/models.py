"""Data models for fleet-patch.

These Pydantic models represent the values passed between the package
loader, the qualification policy, the manifest editor and the per-repository
workflow.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_PACKAGE_NAME_LENGTH = 2


class QualificationResult(str, Enum):
    """Verdict for one package in one repository."""

    ALREADY_AT_TARGET = "already-at-target"
    ALREADY_SATISFIED = "already-satisfied"
    BELOW_MINIMUM = "below-minimum"
    MAJOR_MISMATCH = "major-mismatch"
    NOT_FOUND = "not-found"
    QUALIFIED = "qualified"


class PolicyMode(str, Enum):
    """How the rewrite destination and the qualifying gate relate.

    TARGET_VERSION: the caller names a target; an optional minimum is a floor
    that the current version must meet.
    MINIMUM_AS_TARGET: the minimum is also the destination; only versions
    strictly below it are rewritten.
    """

    TARGET_VERSION = "target-version"
    MINIMUM_AS_TARGET = "minimum-as-target"


class Strategy(str, Enum):
    """How a change lands in the repository."""

    DIRECT = "direct"
    PROPOSE = "propose"


class PatchTarget(BaseModel):
    """One (package, version) pair to attempt in every repository.

    Attributes:
        name: Package name exactly as it appears in manifests. Must be at
              least two characters so a line-prefix search stays specific.
        version: Target version in target-version mode, or the minimum
                 (which doubles as destination) in minimum-as-target mode.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_PACKAGE_NAME_LENGTH:
            raise ValueError(
                f"package name {value!r} is too short and might cause incorrect matches"
            )
        return value

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("version must not be empty")
        return value


class ManifestEntry(BaseModel):
    """The pin line located for a package in a manifest.

    Attributes:
        name: Package name as written on the line.
        operator: Exact-equality operator found ("==", "===" or "=").
        current_version: Version text following the operator.
        line_index: Zero-based index of the line within the manifest.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    operator: str
    current_version: str
    line_index: int


class PackageChange(BaseModel):
    """Records one verified rewrite within a repository."""

    model_config = ConfigDict(frozen=True)

    name: str
    from_version: str
    to_version: str


class RepositoryChangeSet(BaseModel):
    """Verified rewrites for one repository, in work-list order."""

    changes: list[PackageChange] = Field(default_factory=list)

    def add(self, name: str, from_version: str, to_version: str) -> None:
        self.changes.append(
            PackageChange(name=name, from_version=from_version, to_version=to_version)
        )

    @property
    def is_empty(self) -> bool:
        return not self.changes

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.changes]


class PublishPlan(BaseModel):
    """Branches used to land one repository's change set.

    Attributes:
        strategy: DIRECT pushes working_branch; PROPOSE pushes feature_branch
                  and opens a pull request against working_branch.
        working_branch: Branch the manifest is read from.
        feature_branch: Only set for PROPOSE.
    """

    model_config = ConfigDict(frozen=True)

    strategy: Strategy
    working_branch: str
    feature_branch: str | None = None


class RepoStatus(str, Enum):
    """Terminal state reached by one repository."""

    SKIPPED_CHECKOUT = "skipped-checkout"
    SKIPPED_BRANCH = "skipped-branch"
    SKIPPED_MANIFEST = "skipped-manifest"
    NO_CHANGES = "no-changes"
    REJECTED = "rejected"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish-failed"
    FAILED = "failed"


class RepoResult(BaseModel):
    """Outcome of processing one repository."""

    repo: str
    status: RepoStatus
    changes: list[PackageChange] = Field(default_factory=list)
    pr_url: str | None = None
    message: str = ""

    @property
    def landed(self) -> bool:
        return self.status is RepoStatus.PUBLISHED
