"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class EntityId:
    """
    Identifier of an order, user or book.

    Identifiers are opaque strings issued by the store. The only rule
    enforced here is that they are present: surrounding whitespace is
    stripped and an empty result is rejected.
    """
    value: str
    label: str = "id"

    def __post_init__(self):
        if self.value is None:
            raise ValueError(f"{self.label} is required")
        if not isinstance(self.value, str):
            raise ValueError(f"{self.label} must be a string")
        stripped = self.value.strip()
        if not stripped:
            raise ValueError(f"{self.label} is required")
        object.__setattr__(self, "value", stripped)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier for batch run tracing."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)
