"""Tone mapping operators."""

from hdrgrid.tmo.durand import DurandToneMapper, tone_map_durand

__all__ = ["DurandToneMapper", "tone_map_durand"]
