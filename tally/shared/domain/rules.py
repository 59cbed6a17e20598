"""Counter arithmetic applied by the command consumer."""

from __future__ import annotations

from .models import CommandKind, CounterRecord


def apply_command(count: int, kind: CommandKind, floor: int = 0) -> int:
    """Return the count after applying ``kind``.

    Decrease never goes below ``floor``; Reset always lands on 0.
    """
    if kind is CommandKind.INCREASE:
        return count + 1
    if kind is CommandKind.DECREASE:
        return max(floor, count - 1)
    if kind is CommandKind.RESET:
        return 0
    raise ValueError(f"Unknown command kind: {kind!r}")


def apply_to_record(record: CounterRecord, kind: CommandKind, floor: int = 0) -> CounterRecord:
    return record.model_copy(
        update={"current_count": apply_command(record.current_count, kind, floor)}
    )
