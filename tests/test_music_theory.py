import pytest

from tonal_flow.models import Pitch
from tonal_flow.services.music_theory import (
    key_signature_fifths,
    parse_pitch,
    parse_pitch_class,
    pitch_to_midi,
    scale_degree_pitch,
    transpose,
)


def test_parse_pitch_class_reads_letter_and_accidental():
    assert parse_pitch_class("C") == ("C", 0)
    assert parse_pitch_class("F#") == ("F", 1)
    assert parse_pitch_class("bb") == ("B", -1)


def test_parse_pitch_class_rejects_garbage():
    with pytest.raises(ValueError):
        parse_pitch_class("H")


def test_pitch_string_uses_scientific_notation():
    assert str(Pitch(step="E", alter=-1, octave=4)) == "Eb4"
    assert str(Pitch(step="C", alter=2, octave=5)) == "C##5"
    assert str(parse_pitch("F#3")) == "F#3"


def test_pitch_to_midi_respects_octave_of_letter():
    assert pitch_to_midi(parse_pitch("C4")) == 60
    assert pitch_to_midi(parse_pitch("B#3")) == 60
    assert pitch_to_midi(parse_pitch("Cb4")) == 59


def test_scale_degrees_spell_with_successive_letters():
    names = [str(scale_degree_pitch("Eb", "minor", 4, degree)) for degree in range(8)]
    assert names == ["Eb4", "F4", "Gb4", "Ab4", "Bb4", "Cb5", "Db5", "Eb5"]


def test_scale_degree_crosses_octaves():
    assert str(scale_degree_pitch("A", "major", 3, 2)) == "C#4"
    assert str(scale_degree_pitch("A", "major", 3, 9)) == "C#5"


def test_harmonic_minor_on_sharp_tonic_uses_double_sharp_leading_tone():
    assert str(scale_degree_pitch("D#", "harmonic minor", 4, 6)) == "C##5"


def test_scale_degree_returns_none_for_negative_degree():
    assert scale_degree_pitch("C", "major", 4, -1) is None


def test_scale_degree_rejects_unknown_mode():
    with pytest.raises(ValueError):
        scale_degree_pitch("C", "dorian", 4, 0)


def test_transpose_spells_intervals_from_letters():
    assert str(transpose(parse_pitch("C4"), "M3")) == "E4"
    assert str(transpose(parse_pitch("C4"), "m3")) == "Eb4"
    assert str(transpose(parse_pitch("B4"), "P5")) == "F#5"
    assert str(transpose(parse_pitch("D#4"), "m3")) == "F#4"


def test_key_signature_fifths_for_major_and_minor():
    assert key_signature_fifths("C", False) == 0
    assert key_signature_fifths("Bb", False) == -2
    assert key_signature_fifths("C#", False) == 7
    assert key_signature_fifths("G#", False) == 8
    assert key_signature_fifths("A", True) == 0
    assert key_signature_fifths("D#", True) == 6
    assert key_signature_fifths("Db", True) == -8
