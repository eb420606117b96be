from __future__ import annotations

import logging
from typing import Literal

from tonal_flow.logging_utils import log_event
from tonal_flow.models import MINOR_FAMILY, Measure, Note, Pitch, TimedPitch
from tonal_flow.services.music_theory import transpose

SIXTEENTH = 1
WHOLE = 16

Resolution = Literal["turn", "fifth", "extend", "pad"]

logger = logging.getLogger(__name__)


def build_measures(timed_pitches: list[TimedPitch], measure_duration: int, mode: str) -> list[Measure]:
    measures = pack_measures(timed_pitches, measure_duration)
    if not measures:
        return measures

    resolution = classify_final_measure(measures[-1], measure_duration)
    if resolution is None:
        log_event(
            logger,
            "measure_resolution_unmatched",
            level=logging.WARNING,
            note_count=len(measures[-1].notes),
            remaining=measure_duration - measures[-1].duration,
        )
        return measures

    _resolve_final_measure(measures, measure_duration, resolution, mode)
    log_event(logger, "measure_resolution_applied", resolution=resolution, measure_count=len(measures))
    return measures


def pack_measures(timed_pitches: list[TimedPitch], measure_duration: int) -> list[Measure]:
    measures: list[Measure] = []
    current = Measure()
    used = 0

    for timed in timed_pitches:
        current.notes.append(Note(pitch=timed.pitch, duration=timed.duration))
        used += timed.duration
        if used >= measure_duration:
            measures.append(current)
            current = Measure()
            used = 0

    if current.notes:
        measures.append(current)
    return measures


def classify_final_measure(measure: Measure, measure_duration: int) -> Resolution | None:
    """Pick the cadential tail for the last measure.

    The checks overlap (a one-note measure can also be three divisions
    short), so they run in a fixed order and the first match wins.
    """
    remaining = measure_duration - measure.duration
    if remaining == 3:
        return "turn"
    if remaining == 1:
        return "fifth"
    if len(measure.notes) == 1:
        return "extend"
    if len(measure.notes) > 2:
        return "pad"
    return None


def _resolve_final_measure(measures: list[Measure], measure_duration: int, resolution: Resolution, mode: str) -> None:
    last = measures[-1]
    tonic = last.notes[-1].pitch

    if resolution == "extend":
        last.notes[-1].duration = WHOLE
        return

    if resolution == "turn":
        third = transpose(tonic, "m3" if mode in MINOR_FAMILY else "M3")
        fifth = transpose(tonic, "P5")
        last.notes.extend(_sixteenth(p) for p in (third, fifth, third))
    elif resolution == "fifth":
        last.notes.append(_sixteenth(transpose(tonic, "P5")))
    else:
        while last.duration < measure_duration:
            last.notes.append(_sixteenth(tonic))

    measures.append(Measure(notes=[Note(pitch=tonic, duration=WHOLE)]))


def _sixteenth(pitch: Pitch) -> Note:
    return Note(pitch=pitch, duration=SIXTEENTH)
