from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

ResultT = TypeVar("ResultT")


class JobState(Enum):
    """Lifecycle of a single input inside a pool."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class IndexedResult(Generic[ResultT]):
    """
    Outcome of one job, paired with the index of the input that produced it.
    """

    index: int
    result: ResultT
