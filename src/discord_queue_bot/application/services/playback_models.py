"""Result models returned by the playback controller to the command layer."""

from __future__ import annotations

from pydantic import BaseModel

from ...domain.music.entities import Track
from ...domain.music.value_objects import LoopMode
from ...domain.shared.types import NonNegativeInt, VolumePercent


class CommandResult(BaseModel):
    success: bool
    message: str = ""
    track: Track | None = None


class EnqueueResult(BaseModel):
    success: bool
    message: str = ""
    track: Track | None = None
    position: NonNegativeInt = 0
    started: bool = False


class VolumeResult(BaseModel):
    success: bool
    message: str = ""
    volume: VolumePercent = 50


class LoopResult(BaseModel):
    success: bool
    message: str = ""
    mode: LoopMode = LoopMode.OFF
