"""Portfolio validation.

A single explicit pass run before a portfolio is created or updated.
Every rule is checked so the caller sees all violated fields at once:

- user_id:        required, an integer or its decimal string form
- name:           non-blank after trimming
- classification: one of TRADING, AFS, HTM
- name:           unique among the same user's portfolios (trimmed,
                  case-insensitive); other users may reuse it
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from folio.services.portfolio.models import Classification, Portfolio


@dataclass(frozen=True)
class FieldViolation:
    """One violated rule."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field} {self.message}"


class PortfolioValidationError(ValueError):
    """Portfolio attributes failed validation. Carries every violation."""

    def __init__(self, violations: list[FieldViolation]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(str(v) for v in self.violations))

    @property
    def fields(self) -> set[str]:
        return {v.field for v in self.violations}


@dataclass
class ValidationResult:
    """Outcome of validate_portfolio()."""

    violations: list[FieldViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def fields(self) -> set[str]:
        return {v.field for v in self.violations}

    def add(self, field_name: str, message: str) -> None:
        self.violations.append(FieldViolation(field_name, message))

    def raise_for_violations(self) -> None:
        """
        Raise if any rule was violated.

        Raises:
            PortfolioValidationError: With all violations
        """
        if self.violations:
            raise PortfolioValidationError(self.violations)


def normalize_name(name: str) -> str:
    """Comparison key for per-user name uniqueness."""
    return " ".join(name.split()).casefold()


def parse_user_id(value: Any) -> int | None:
    """Return value as an integer user id, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_classification(value: Any) -> Classification | None:
    """Return the Classification for value, or None if it is not one."""
    if isinstance(value, Classification):
        return value
    if isinstance(value, str):
        try:
            return Classification(value.strip())
        except ValueError:
            return None
    return None


def validate_portfolio(
    *,
    user_id: Any,
    name: Any,
    classification: Any,
    existing: Iterable[Portfolio] = (),
    portfolio_id: str | None = None,
) -> ValidationResult:
    """
    Validate portfolio attributes.

    Args:
        user_id: Owning user id
        name: Proposed name
        classification: Proposed classification
        existing: Portfolios already stored (any user)
        portfolio_id: Id of the portfolio being updated, excluded from the
            uniqueness check. None for creates.

    Returns:
        ValidationResult listing every violation
    """
    result = ValidationResult()

    owner = parse_user_id(user_id)
    if user_id is None or (isinstance(user_id, str) and not user_id.strip()):
        result.add("user_id", "can't be blank")
    elif owner is None:
        result.add("user_id", f"is not a valid user id, got {user_id!r}")

    name_text = name.strip() if isinstance(name, str) else ""
    if not name_text:
        result.add("name", "can't be blank")

    if parse_classification(classification) is None:
        allowed = ", ".join(c.value for c in Classification)
        result.add("classification", f"must be one of {allowed}, got {classification!r}")

    if owner is not None and name_text:
        key = normalize_name(name_text)
        for other in existing:
            if other.portfolio_id == portfolio_id:
                continue
            if other.user_id == owner and normalize_name(other.name) == key:
                result.add("name", "has already been taken")
                break

    return result
