from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Tempo:
    """Four-phase lifting tempo, e.g. ``"3110"``, in seconds per phase."""

    lowering: int
    pause_bottom: int
    lifting: int
    pause_top: int


class TempoTools:
    """Helpers for four-digit tempo notation."""

    @staticmethod
    def parse_tempo(tempo: Optional[str]) -> Optional[Tempo]:
        """Return the :class:`Tempo` for ``tempo`` or ``None`` if malformed."""
        if not tempo or len(tempo) != 4 or not all(c in "0123456789" for c in tempo):
            return None
        lowering, pause_bottom, lifting, pause_top = (int(c) for c in tempo)
        return Tempo(lowering, pause_bottom, lifting, pause_top)

    @staticmethod
    def format_tempo(tempo: Tempo) -> str:
        return f"{tempo.lowering}{tempo.pause_bottom}{tempo.lifting}{tempo.pause_top}"

    @staticmethod
    def tempo_description(tempo: Tempo) -> str:
        parts = [f"{tempo.lowering}s down"]
        if tempo.pause_bottom > 0:
            parts.append(f"{tempo.pause_bottom}s pause")
        parts.append(f"{tempo.lifting}s up")
        if tempo.pause_top > 0:
            parts.append(f"{tempo.pause_top}s hold")
        return " → ".join(parts)

    @staticmethod
    def tempo_rep_duration(tempo: Tempo) -> int:
        return tempo.lowering + tempo.pause_bottom + tempo.lifting + tempo.pause_top

    @staticmethod
    def time_under_tension(tempo: Tempo, reps: int) -> int:
        """Seconds under load for ``reps`` repetitions at ``tempo``."""
        if reps <= 0:
            return 0
        return TempoTools.tempo_rep_duration(tempo) * reps
