from __future__ import annotations

from dataclasses import dataclass

from tonal_flow.models import Measure

LEGAL_DURATIONS = frozenset({1, 2, 4, 8, 16})


@dataclass
class ValidationDiagnostics:
    fatal: list[str]
    warnings: list[str]


def validate_measures(measures: list[Measure], measure_duration: int) -> list[str]:
    report = validate_measures_diagnostics(measures, measure_duration)
    return [*report.fatal, *report.warnings]


def validate_measures_diagnostics(measures: list[Measure], measure_duration: int) -> ValidationDiagnostics:
    fatal: list[str] = []
    warnings: list[str] = []
    if not measures:
        return ValidationDiagnostics(fatal=["Score must contain at least one measure."], warnings=[])

    last_number = len(measures)
    for number, measure in enumerate(measures, start=1):
        total = measure.duration
        if number < last_number and total != measure_duration:
            fatal.append(f"Measure {number} has {total} divisions; expected {measure_duration}.")
        elif number == last_number and total not in {measure_duration, 16}:
            warnings.append(f"Final measure {number} has {total} divisions; expected {measure_duration}.")

        if number == 1 and measure.attributes is None:
            fatal.append("Measure 1 is missing key/time/clef attributes.")
        elif number > 1 and measure.attributes is not None:
            fatal.append(f"Measure {number} repeats key/time/clef attributes.")

        if measure.double_bar and number != last_number:
            fatal.append(f"Measure {number} has a closing double bar before the end.")
        elif not measure.double_bar and number == last_number:
            fatal.append(f"Final measure {number} is missing its closing double bar.")

        for note in measure.notes:
            if note.duration not in LEGAL_DURATIONS:
                warnings.append(f"Measure {number} note {note.pitch} has unsupported duration {note.duration}.")

    return ValidationDiagnostics(fatal=fatal, warnings=warnings)
