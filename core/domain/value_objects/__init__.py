"""Domain value objects."""

from .value_objects import EntityId, ExecutionID

__all__ = [
    "EntityId",
    "ExecutionID",
]
