"""Ordered, immutable registry of wizard step descriptors."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class StepDescriptor:
    id: str
    title: str
    description: str = ""


class StepRegistry:
    """
    Fixed sequence of steps supplied once when a wizard starts.

    Order defines navigation order. Ids must be unique; there is no
    reordering or conditional skipping.
    """

    def __init__(self, steps: Iterable[StepDescriptor]):
        self._steps: tuple[StepDescriptor, ...] = tuple(steps)
        if not self._steps:
            raise ValueError("A wizard needs at least one step")

        self._index: dict[str, int] = {}
        for position, step in enumerate(self._steps):
            if step.id in self._index:
                raise ValueError(f"Duplicate step id: {step.id!r}")
            self._index[step.id] = position

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[StepDescriptor]:
        return iter(self._steps)

    def __getitem__(self, index: int) -> StepDescriptor:
        return self._steps[index]

    def __repr__(self) -> str:
        return f"StepRegistry({[step.id for step in self._steps]!r})"

    @property
    def ids(self) -> list[str]:
        return [step.id for step in self._steps]

    def index_of(self, step_id: str) -> int | None:
        """Position of ``step_id``, or None if it is not registered."""
        return self._index.get(step_id)
