import logging
import xml.etree.ElementTree as ET

from tonal_flow.models import Clef, Measure, MeasureAttributes, Note, TimeSignature
from tonal_flow.services.music_theory import parse_pitch
from tonal_flow.services.musicxml_export import export_musicxml, note_type_for_duration
from tonal_flow.services.scales import resolve_scale


def _note(name, duration, slur=None):
    return Note(pitch=parse_pitch(name), duration=duration, slur=slur)


def _sample_measures():
    return [
        Measure(
            attributes=MeasureAttributes(
                key_fifths=-3,
                key_mode="minor",
                time=TimeSignature(beats=4, beat_type=4),
                clef=Clef(sign="G", line=2),
            ),
            notes=[_note("C4", 4, "start"), _note("Eb4", 4, "stop"), _note("G4", 8)],
        ),
        Measure(notes=[_note("C4", 16)], double_bar=True),
    ]


def _parse(xml):
    body = xml.split("\n", 3)[3]
    return ET.fromstring(body)


def test_export_musicxml_is_well_formed_score_partwise():
    xml = export_musicxml(_sample_measures())

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8" standalone="no"?>')
    assert "<!DOCTYPE score-partwise" in xml
    root = _parse(xml)
    assert root.tag == "score-partwise"
    assert root.find("part-list/score-part/part-name").text == "Music"
    assert [m.get("number") for m in root.iter("measure")] == ["1", "2"]


def test_attributes_only_on_first_measure_and_barline_only_on_last():
    root = _parse(export_musicxml(_sample_measures()))
    first, last = root.findall("part/measure")

    assert first.find("attributes/divisions").text == "4"
    assert first.find("attributes/key/fifths").text == "-3"
    assert first.find("attributes/key/mode").text == "minor"
    assert first.find("attributes/time/beats").text == "4"
    assert first.find("attributes/time/beat-type").text == "4"
    assert first.find("attributes/clef/sign").text == "G"
    assert first.find("attributes/clef/line").text == "2"
    assert first.find("barline") is None

    assert last.find("attributes") is None
    assert last.find("barline").get("location") == "right"
    assert last.find("barline/bar-style").text == "light-heavy"


def test_notes_carry_pitch_duration_type_and_slurs():
    root = _parse(export_musicxml(_sample_measures()))
    notes = root.findall("part/measure/note")

    assert notes[0].find("pitch/alter") is None
    assert notes[1].find("pitch/step").text == "E"
    assert notes[1].find("pitch/alter").text == "-1"
    assert [n.find("type").text for n in notes] == ["quarter", "quarter", "half", "whole"]
    assert [n.find("duration").text for n in notes] == ["4", "4", "8", "16"]
    assert notes[0].find("notations/slur").get("type") == "start"
    assert notes[1].find("notations/slur").get("type") == "stop"
    assert notes[2].find("notations") is None


def test_duration_type_table_and_quarter_fallback(caplog):
    assert [note_type_for_duration(d) for d in (1, 2, 4, 8, 16)] == ["16th", "eighth", "quarter", "half", "whole"]

    with caplog.at_level(logging.WARNING):
        assert note_type_for_duration(3) == "quarter"
    assert any(getattr(record, "event", "") == "musicxml_unknown_duration" for record in caplog.records)


def test_double_sharp_leading_tone_is_written_as_alter_two():
    pitches = resolve_scale("D#", "harmonic minor", 4, 1)
    leading_tone = pitches[6]
    assert str(leading_tone) == "C##5"

    measures = _sample_measures()
    measures[0].notes[2] = Note(pitch=leading_tone, duration=8)
    notes = _parse(export_musicxml(measures)).findall("part/measure/note")

    assert notes[2].find("pitch/step").text == "C"
    assert notes[2].find("pitch/alter").text == "2"
    assert notes[2].find("pitch/octave").text == "5"
