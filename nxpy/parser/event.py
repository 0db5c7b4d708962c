"""Parser events."""

from dataclasses import dataclass
from typing import Protocol

from nxpy.syntax import NxSyntaxKind
from nxpy.text import TextSize


@dataclass(frozen=True, slots=True)
class StartEvent:
    kind: NxSyntaxKind
    forward_parent: int | None = None
    field: str | None = None

    @staticmethod
    def tombstone() -> "StartEvent":
        return StartEvent(kind=NxSyntaxKind.TOMBSTONE, forward_parent=None)


@dataclass(frozen=True, slots=True)
class FinishEvent:
    pass


@dataclass(frozen=True, slots=True)
class TokenEvent:
    kind: NxSyntaxKind
    end: TextSize
    field: str | None = None


Event = StartEvent | FinishEvent | TokenEvent


class TreeSink(Protocol):
    def token(self, kind: NxSyntaxKind, end: TextSize, field: str | None = None) -> None: ...

    def start_node(self, kind: NxSyntaxKind, field: str | None = None) -> None: ...

    def finish_node(self) -> None: ...


def process_events(sink: TreeSink, events: list[Event]) -> None:
    """Replay `events` into `sink`, resolving `forward_parent` chains."""
    forward_parents: list[tuple[NxSyntaxKind, str | None]] = []

    idx = 0
    while idx < len(events):
        event = events[idx]
        if isinstance(event, StartEvent):
            if event.kind == NxSyntaxKind.TOMBSTONE:
                idx += 1
                continue

            forward_parents.append((event.kind, event.field))
            parent_idx = idx
            parent_offset = event.forward_parent

            while parent_offset is not None:
                parent_idx += parent_offset
                if parent_idx >= len(events):
                    raise RuntimeError("Invalid forward_parent offset in parser events")

                parent_event = events[parent_idx]
                if not isinstance(parent_event, StartEvent):
                    raise RuntimeError("forward_parent must point to StartEvent")

                events[parent_idx] = StartEvent.tombstone()
                if parent_event.kind != NxSyntaxKind.TOMBSTONE:
                    forward_parents.append((parent_event.kind, parent_event.field))

                parent_offset = parent_event.forward_parent

            while forward_parents:
                kind, field = forward_parents.pop()
                sink.start_node(kind, field)
        elif isinstance(event, FinishEvent):
            sink.finish_node()
        else:
            sink.token(event.kind, event.end, event.field)

        idx += 1
