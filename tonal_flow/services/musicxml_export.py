from __future__ import annotations

import logging

from tonal_flow.logging_utils import log_event
from tonal_flow.models import Measure, MeasureAttributes, Note

logger = logging.getLogger(__name__)

DIVISIONS_PER_QUARTER = 4
PART_NAME = "Music"

_DURATION_TYPES: dict[int, str] = {
    1: "16th",
    2: "eighth",
    4: "quarter",
    8: "half",
    16: "whole",
}
# Durations outside the table are written as quarters rather than failing the render.
_FALLBACK_TYPE = "quarter"


def export_musicxml(measures: list[Measure]) -> str:
    log_event(logger, "musicxml_render_started", measure_count=len(measures))

    lines: list[str] = [
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>',
        '<!DOCTYPE score-partwise PUBLIC "-//Recordare//DTD MusicXML 3.1 Partwise//EN"',
        '  "http://www.musicxml.org/dtds/partwise.dtd">',
        '<score-partwise version="3.1">',
        "  <part-list>",
        '    <score-part id="P1">',
        f"      <part-name>{PART_NAME}</part-name>",
        "    </score-part>",
        "  </part-list>",
        '  <part id="P1">',
    ]

    for number, measure in enumerate(measures, start=1):
        lines.append(f'    <measure number="{number}">')
        if measure.attributes is not None:
            lines.extend(_attributes_xml(measure.attributes))
        for note in measure.notes:
            lines.extend(_note_xml(note))
        if measure.double_bar:
            lines.extend(
                [
                    '      <barline location="right">',
                    "        <bar-style>light-heavy</bar-style>",
                    "      </barline>",
                ]
            )
        lines.append("    </measure>")

    lines.extend(["  </part>", "</score-partwise>"])

    content = "\n".join(lines)
    log_event(
        logger,
        "musicxml_render_completed",
        output_size_bytes=len(content.encode("utf-8")),
        measure_count=len(measures),
    )
    return content


def note_type_for_duration(duration: int) -> str:
    note_type = _DURATION_TYPES.get(duration)
    if note_type is None:
        log_event(logger, "musicxml_unknown_duration", level=logging.WARNING, duration=duration)
        return _FALLBACK_TYPE
    return note_type


def _attributes_xml(attributes: MeasureAttributes) -> list[str]:
    return [
        "      <attributes>",
        f"        <divisions>{DIVISIONS_PER_QUARTER}</divisions>",
        f"        <key><fifths>{attributes.key_fifths}</fifths><mode>{attributes.key_mode}</mode></key>",
        f"        <time><beats>{attributes.time.beats}</beats><beat-type>{attributes.time.beat_type}</beat-type></time>",
        f"        <clef><sign>{attributes.clef.sign}</sign><line>{attributes.clef.line}</line></clef>",
        "      </attributes>",
    ]


def _note_xml(note: Note) -> list[str]:
    lines = [
        "      <note>",
        "        <pitch>",
        f"          <step>{note.pitch.step}</step>",
    ]
    if note.pitch.alter:
        lines.append(f"          <alter>{note.pitch.alter}</alter>")
    lines.extend(
        [
            f"          <octave>{note.pitch.octave}</octave>",
            "        </pitch>",
            f"        <duration>{note.duration}</duration>",
            f"        <type>{note_type_for_duration(note.duration)}</type>",
        ]
    )
    if note.slur is not None:
        lines.extend(
            [
                "        <notations>",
                f'          <slur type="{note.slur}" number="1"/>',
                "        </notations>",
            ]
        )
    lines.append("      </note>")
    return lines
