from __future__ import annotations

from tonal_flow.models import Measure
from tonal_flow.services.scales import UnknownPatternError

BEAT_DIVISIONS = 4
WHOLE = 16

# Slur pattern -> (beat positions that start a slur, positions that stop one),
# with positions counted in sixteenths from the start of the beat.
SLUR_POSITIONS: dict[str, tuple[frozenset[int], frozenset[int]]] = {
    "slur two tongue two": (frozenset({0}), frozenset({1})),
    "tongue two slur two": (frozenset({2}), frozenset({3})),
    "slur two slur two": (frozenset({0, 2}), frozenset({1, 3})),
    "tongue one slur two tongue one": (frozenset({1}), frozenset({2})),
    "slur three tongue one": (frozenset({0}), frozenset({2})),
    "tongue one slur three": (frozenset({1}), frozenset({3})),
    "slur four": (frozenset({0}), frozenset({3})),
    "tongued": (frozenset(), frozenset()),
}


def apply_slur_pattern(measures: list[Measure], pattern: str) -> list[Measure]:
    if pattern not in SLUR_POSITIONS:
        raise UnknownPatternError(f"Unknown slur pattern '{pattern}'.")

    starts, stops = SLUR_POSITIONS[pattern]
    for measure in measures:
        onset = 0
        for note in measure.notes:
            if note.duration != WHOLE:
                position = onset % BEAT_DIVISIONS
                if position in starts:
                    note.slur = "start"
                elif position in stops:
                    note.slur = "stop"
            onset += note.duration
    return measures
