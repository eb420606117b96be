from __future__ import annotations

import re

from tonal_flow.models import Pitch

STEPS = ("C", "D", "E", "F", "G", "A", "B")
STEP_TO_SEMITONE = {
    "C": 0,
    "D": 2,
    "E": 4,
    "F": 5,
    "G": 7,
    "A": 9,
    "B": 11,
}
ACCIDENTAL_TO_ALTER = {"": 0, "#": 1, "##": 2, "b": -1, "bb": -2}

# Position of each natural major key on the circle of fifths.
STEP_FIFTHS = {"F": -1, "C": 0, "G": 1, "D": 2, "A": 3, "E": 4, "B": 5}

SCALE_PATTERNS = {
    "major": [0, 2, 4, 5, 7, 9, 11],
    "minor": [0, 2, 3, 5, 7, 8, 10],
    "harmonic minor": [0, 2, 3, 5, 7, 8, 11],
    "melodic minor": [0, 2, 3, 5, 7, 9, 11],
}

# Interval name -> (diatonic steps, semitones)
INTERVALS = {
    "m3": (2, 3),
    "M3": (2, 4),
    "P5": (4, 7),
}

MAX_ALTER = 2

_PITCH_CLASS_RE = re.compile(r"([A-Ga-g])(#{0,2}|b{0,2})")
_PITCH_RE = re.compile(r"([A-Ga-g])(#{0,2}|b{0,2})(-?\d+)")


def parse_pitch_class(name: str) -> tuple[str, int]:
    m = _PITCH_CLASS_RE.fullmatch(name.strip())
    if not m:
        raise ValueError(f"Invalid pitch class '{name}'.")
    return m.group(1).upper(), ACCIDENTAL_TO_ALTER[m.group(2)]


def parse_pitch(name: str) -> Pitch:
    m = _PITCH_RE.fullmatch(name.strip())
    if not m:
        raise ValueError(f"Invalid pitch '{name}'. Use forms like C4, F#3, Bb5.")
    alter = ACCIDENTAL_TO_ALTER[m.group(2)]
    return Pitch(step=m.group(1).upper(), alter=alter or None, octave=int(m.group(3)))


def pitch_to_midi(pitch: Pitch) -> int:
    return (pitch.octave + 1) * 12 + STEP_TO_SEMITONE[pitch.step] + (pitch.alter or 0)


def diatonic_index(pitch: Pitch) -> int:
    return pitch.octave * 7 + STEPS.index(pitch.step)


def spell_pitch(diatonic: int, midi: int) -> Pitch | None:
    """Name ``midi`` with the letter at ``diatonic``; ``None`` past double accidentals."""
    octave, step_index = divmod(diatonic, 7)
    step = STEPS[step_index]
    alter = midi - ((octave + 1) * 12 + STEP_TO_SEMITONE[step])
    if abs(alter) > MAX_ALTER:
        return None
    return Pitch(step=step, alter=alter or None, octave=octave)


def scale_degree_pitch(tonic: str, mode: str, start_octave: int, degree: int) -> Pitch | None:
    """Pitch of ``degree`` (0 = tonic at ``start_octave``) in the named scale.

    Degrees keep climbing through the following octaves, so degree 7 is the
    tonic an octave up. Every degree takes the next letter name, which gives
    the conventional spelling (Eb rather than D# in C minor).
    """
    if mode not in SCALE_PATTERNS:
        raise ValueError(f"Unknown mode '{mode}'.")
    if degree < 0:
        return None

    step, alter = parse_pitch_class(tonic)
    root = Pitch(step=step, alter=alter or None, octave=start_octave)
    octave_shift, index = divmod(degree, 7)
    midi = pitch_to_midi(root) + 12 * octave_shift + SCALE_PATTERNS[mode][index]
    return spell_pitch(diatonic_index(root) + degree, midi)


def transpose(pitch: Pitch, interval: str) -> Pitch:
    if interval not in INTERVALS:
        raise ValueError(f"Unsupported interval '{interval}'.")
    steps, semitones = INTERVALS[interval]
    transposed = spell_pitch(diatonic_index(pitch) + steps, pitch_to_midi(pitch) + semitones)
    if transposed is None:
        raise ValueError(f"Cannot spell {pitch} transposed by {interval}.")
    return transposed


def key_signature_fifths(tonic: str, is_minor: bool) -> int:
    step, alter = parse_pitch_class(tonic)
    fifths = STEP_FIFTHS[step] + 7 * alter
    # The relative major sits a minor third above, three fifths further sharp.
    return fifths - 3 if is_minor else fifths
