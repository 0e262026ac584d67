from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

# ---- ingest-level primitives ----

@dataclass(frozen=True, slots=True)
class Tick:
    symbol: str
    ts: int       # epoch milliseconds
    price: float

# ---- alerting domain ----

Breakout = Literal["HOD", "LOD"]
Severity = Literal["normal", "urgent"]

@dataclass(frozen=True, slots=True)
class RuleHit:
    """
    Which rule components are active for one evaluation.
    Only turned into a display string (see `label`) at the sink boundary.
    """
    breakout: Optional[Breakout] = None
    swing: bool = False
    momentum: bool = False

    def any(self) -> bool:
        return self.breakout is not None or self.swing or self.momentum

    @property
    def label(self) -> str:
        # fixed order: breakout -> swing -> momentum
        parts: list[str] = []
        if self.breakout is not None:
            parts.append(f"breakout_{self.breakout}")
        if self.swing:
            parts.append("swing")
        if self.momentum:
            parts.append("momentum")
        return "+".join(parts)

@dataclass(frozen=True, slots=True)
class AlertEvent:
    symbol: str
    price: float
    ts: int              # epoch ms of the evaluation that fired
    rule: RuleHit
    change_pct: float    # rounded to 2 decimals
    severity: Severity
