from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


Mode = Literal["major", "minor", "harmonic minor", "melodic minor"]
RhythmPattern = Literal["long octave", "sixteenths", "eighth two sixteenths"]
SlurPattern = Literal[
    "slur two tongue two",
    "tongue two slur two",
    "slur two slur two",
    "tongue one slur two tongue one",
    "slur three tongue one",
    "tongue one slur three",
    "slur four",
    "tongued",
]
SlurState = Literal["start", "stop"]
Step = Literal["A", "B", "C", "D", "E", "F", "G"]

MODES: tuple[Mode, ...] = ("major", "minor", "harmonic minor", "melodic minor")
MINOR_FAMILY: frozenset[str] = frozenset({"minor", "harmonic minor", "melodic minor"})
RHYTHM_PATTERNS: tuple[RhythmPattern, ...] = ("long octave", "sixteenths", "eighth two sixteenths")
SLUR_PATTERNS: tuple[SlurPattern, ...] = (
    "slur two tongue two",
    "tongue two slur two",
    "slur two slur two",
    "tongue one slur two tongue one",
    "slur three tongue one",
    "tongue one slur three",
    "slur four",
    "tongued",
)
VALID_KEYS = ("C", "C#", "Db", "D", "D#", "Eb", "E", "F", "F#", "Gb", "G", "G#", "Ab", "A", "A#", "Bb", "B")


class Pitch(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: Step
    # Double sharps occur as the raised 7th of sharp-key harmonic and melodic minor.
    alter: int | None = Field(default=None, ge=-2, le=2)
    octave: int

    def __str__(self) -> str:
        accidental = ""
        if self.alter:
            accidental = ("#" if self.alter > 0 else "b") * abs(self.alter)
        return f"{self.step}{accidental}{self.octave}"


class TimedPitch(BaseModel):
    pitch: Pitch
    duration: int = Field(ge=1, description="Duration in divisions; a quarter note is 4")


class Note(BaseModel):
    pitch: Pitch
    duration: int = Field(ge=1)
    slur: SlurState | None = None


class TimeSignature(BaseModel):
    beats: int = Field(ge=1)
    beat_type: int = 4


class Clef(BaseModel):
    sign: str = "G"
    line: int = 2


class MeasureAttributes(BaseModel):
    key_fifths: int = Field(ge=-7, le=7)
    key_mode: Literal["major", "minor"] = "major"
    time: TimeSignature
    clef: Clef = Field(default_factory=Clef)


class Measure(BaseModel):
    attributes: MeasureAttributes | None = None
    notes: list[Note] = Field(default_factory=list)
    double_bar: bool = False

    @property
    def duration(self) -> int:
        return sum(note.duration for note in self.notes)


class ScaleOptions(BaseModel):
    key: str = "C"
    mode: Mode = "major"
    rhythm_pattern: RhythmPattern = "long octave"
    slur_pattern: SlurPattern = "tongued"
    octaves: int = Field(default=1, ge=1, le=3)
    start_octave: Literal[3, 4] = 4

    @field_validator("key")
    @classmethod
    def validate_key(cls, value: str) -> str:
        cleaned = value.strip()
        if cleaned[:1].islower():
            cleaned = cleaned[0].upper() + cleaned[1:]
        if cleaned not in VALID_KEYS:
            raise ValueError("Invalid key. Use pitch-class keys like C, F#, Bb.")
        return cleaned


class ModesResponse(BaseModel):
    key: str
    modes: list[Mode]


class ScaleScoreResponse(BaseModel):
    options: ScaleOptions
    time_signature: str
    key_fifths: int
    measures: list[Measure]
    warnings: list[str] = Field(default_factory=list)
