from __future__ import annotations

import logging
from dataclasses import dataclass

from tonal_flow.logging_utils import log_event
from tonal_flow.models import MINOR_FAMILY, Clef, Measure, MeasureAttributes, ScaleOptions, TimedPitch, TimeSignature
from tonal_flow.services.articulation import apply_slur_pattern
from tonal_flow.services.measures import build_measures, classify_final_measure, pack_measures
from tonal_flow.services.musicxml_export import DIVISIONS_PER_QUARTER, export_musicxml
from tonal_flow.services.scales import apply_rhythm, available_modes, key_signature, resolve_scale, time_signature_beats
from tonal_flow.services.score_validation import validate_measures_diagnostics

BEAT_TYPE = 4

logger = logging.getLogger(__name__)


class ScaleGenerationError(ValueError):
    pass


@dataclass
class GeneratedScale:
    measures: list[Measure]
    measure_duration: int
    warnings: list[str]


def generate_scale_measures(options: ScaleOptions) -> list[Measure]:
    return generate_scale(options).measures


def generate_scale(options: ScaleOptions) -> GeneratedScale:
    log_event(
        logger,
        "scale_generation_started",
        key=options.key,
        mode=options.mode,
        rhythm_pattern=options.rhythm_pattern,
        slur_pattern=options.slur_pattern,
        octaves=options.octaves,
        start_octave=options.start_octave,
    )
    if options.mode not in available_modes(options.key):
        raise ScaleGenerationError(f"{options.key} {options.mode} needs more than seven accidentals in its key signature.")

    beats = time_signature_beats(options.rhythm_pattern, options.octaves)
    measure_duration = beats * DIVISIONS_PER_QUARTER
    timed = _timed_scale(options, measure_duration)

    measures = build_measures(timed, measure_duration, options.mode)
    if not measures:
        raise ScaleGenerationError(f"No notes resolved for {options.key} {options.mode}.")

    measures[0].attributes = MeasureAttributes(
        key_fifths=key_signature(options.key, options.mode),
        key_mode="minor" if options.mode in MINOR_FAMILY else "major",
        time=TimeSignature(beats=beats, beat_type=BEAT_TYPE),
        clef=Clef(sign="G", line=2),
    )
    measures[-1].double_bar = True
    apply_slur_pattern(measures, options.slur_pattern)

    report = validate_measures_diagnostics(measures, measure_duration)
    if report.fatal:
        log_event(logger, "validation_failed", level=logging.ERROR, stage="scale_generation", diagnostics=report.fatal)
        raise ScaleGenerationError("Generated measures failed validation.")
    if report.warnings:
        log_event(logger, "validation_failed", level=logging.WARNING, stage="scale_generation", diagnostics=report.warnings)

    log_event(logger, "scale_generation_completed", measure_count=len(measures), note_count=sum(len(m.notes) for m in measures))
    return GeneratedScale(measures=measures, measure_duration=measure_duration, warnings=report.warnings)


def generate_musicxml_for_scale(options: ScaleOptions) -> str:
    return export_musicxml(generate_scale_measures(options))


def _timed_scale(options: ScaleOptions, measure_duration: int) -> list[TimedPitch]:
    """Scale run with durations, reaching one degree past the top when that lands a cleaner cadence.

    The overshoot is only taken when the plain run would end in repeated
    padding (or no resolution at all) and the longer run resolves with a
    cadential figure or a single held note instead.
    """
    plain = _timed_run(options, overshoot_octave=False)
    if _resolves_cleanly(plain, measure_duration):
        return plain

    overshoot = _timed_run(options, overshoot_octave=True)
    if _resolves_cleanly(overshoot, measure_duration):
        log_event(logger, "scale_overshoot_selected", rhythm_pattern=options.rhythm_pattern, octaves=options.octaves)
        return overshoot
    return plain


def _timed_run(options: ScaleOptions, overshoot_octave: bool) -> list[TimedPitch]:
    pitches = resolve_scale(options.key, options.mode, options.start_octave, options.octaves, overshoot_octave)
    return apply_rhythm(pitches, options.rhythm_pattern)


def _resolves_cleanly(timed: list[TimedPitch], measure_duration: int) -> bool:
    measures = pack_measures(timed, measure_duration)
    return bool(measures) and classify_final_measure(measures[-1], measure_duration) in {"turn", "fifth", "extend"}
