from __future__ import annotations

from tonal_flow.models import MINOR_FAMILY, MODES, Mode, Pitch, TimedPitch
from tonal_flow.services.music_theory import key_signature_fifths, scale_degree_pitch

SIXTEENTH = 1
EIGHTH = 2
MAX_KEY_FIFTHS = 7

# Beats per measure for "eighth two sixteenths", by octave count.
EIGHTH_TWO_SIXTEENTHS_BEATS = {1: 6, 2: 5, 3: 7}


class UnknownPatternError(ValueError):
    pass


def resolve_scale(
    key: str,
    mode: Mode,
    start_octave: int,
    octaves: int,
    overshoot_octave: bool = False,
) -> list[Pitch]:
    if mode not in MODES:
        raise UnknownPatternError(f"Unknown mode '{mode}'.")

    top_degree = 7 * octaves + (1 if overshoot_octave else 0)
    ascending = [scale_degree_pitch(key, mode, start_octave, degree) for degree in range(top_degree + 1)]

    if mode == "melodic minor":
        # Melodic minor comes back down in its natural form.
        descending = [scale_degree_pitch(key, "minor", start_octave, degree) for degree in range(top_degree, -1, -1)]
    else:
        descending = list(reversed(ascending))

    return [pitch for pitch in ascending + descending[1:] if pitch is not None]


def apply_rhythm(pitches: list[Pitch], pattern: str) -> list[TimedPitch]:
    if pattern == "long octave":
        return [TimedPitch(pitch=p, duration=EIGHTH if i % 7 == 0 else SIXTEENTH) for i, p in enumerate(pitches)]
    if pattern == "sixteenths":
        return [TimedPitch(pitch=p, duration=SIXTEENTH) for p in pitches]
    if pattern == "eighth two sixteenths":
        return [TimedPitch(pitch=p, duration=EIGHTH if i % 3 == 0 else SIXTEENTH) for i, p in enumerate(pitches)]
    raise UnknownPatternError(f"Unknown rhythm pattern '{pattern}'.")


def key_signature(key: str, mode: Mode) -> int:
    if mode not in MODES:
        raise UnknownPatternError(f"Unknown mode '{mode}'.")
    return key_signature_fifths(key, mode in MINOR_FAMILY)


def available_modes(key: str) -> list[Mode]:
    return [mode for mode in MODES if abs(key_signature(key, mode)) <= MAX_KEY_FIFTHS]


def time_signature_beats(pattern: str, octaves: int) -> int:
    if pattern in {"long octave", "sixteenths"}:
        return 4
    if pattern == "eighth two sixteenths":
        if octaves not in EIGHTH_TWO_SIXTEENTHS_BEATS:
            raise UnknownPatternError(f"No time signature for '{pattern}' over {octaves} octaves.")
        return EIGHTH_TWO_SIXTEENTHS_BEATS[octaves]
    raise UnknownPatternError(f"Unknown rhythm pattern '{pattern}'.")
