"""
Stack outputs collected while the graph is built.

Each stage appends the outputs it produces; the emitter keeps emission order
and exposes them once the build finishes. Values may be literals or the
Ref/Concat values of sitecdn.graph, resolved by the backend.
"""

from dataclasses import dataclass
from typing import Any, Iterator


@dataclass(frozen=True)
class StackOutput:
    name: str
    description: str
    value: Any


class OutputEmitter:
    """Append-only, ordered collection of StackOutputs."""

    def __init__(self):
        self._outputs: list[StackOutput] = []

    def emit(self, output: StackOutput) -> None:
        self._outputs.append(output)

    def names(self) -> list[str]:
        return [output.name for output in self._outputs]

    def as_dict(self) -> dict[str, Any]:
        return {output.name: output.value for output in self._outputs}

    def __iter__(self) -> Iterator[StackOutput]:
        return iter(self._outputs)

    def __len__(self) -> int:
        return len(self._outputs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OutputEmitter):
            return NotImplemented
        return self._outputs == other._outputs
