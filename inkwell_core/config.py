from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Literal

from .angles import PI_OVER_2
from .errors import ConfigurationError


StopPolicy = Literal["passthrough", "sort", "reject"]

STOP_POLICIES: tuple[str, ...] = ("passthrough", "sort", "reject")


@dataclass(frozen=True)
class DrawConfig:
    """Knobs shared by the drawing context and the concrete surfaces."""

    stop_policy: StopPolicy = "passthrough"
    strict_capabilities: bool = False
    svg_precision: int = 4
    arc_segment_radians: float = PI_OVER_2

    def __post_init__(self) -> None:
        if self.stop_policy not in STOP_POLICIES:
            raise ConfigurationError(
                f"stop policy must be one of {', '.join(STOP_POLICIES)}; got {self.stop_policy!r}"
            )
        if self.svg_precision < 0:
            raise ConfigurationError("svg precision must be >= 0")
        if not (0.0 < self.arc_segment_radians <= PI_OVER_2):
            raise ConfigurationError("arc segment span must be in (0, PI/2]")

    @classmethod
    def from_env(
        cls,
        *,
        stop_policy_env_var: str = "INKWELL_STOP_POLICY",
        strict_env_var: str = "INKWELL_STRICT_CAPABILITIES",
        precision_env_var: str = "INKWELL_SVG_PRECISION",
        arc_segment_env_var: str = "INKWELL_ARC_SEGMENT_RADIANS",
    ) -> "DrawConfig":
        stop_policy = os.getenv(stop_policy_env_var, "passthrough").strip().lower() or "passthrough"
        strict = os.getenv(strict_env_var, "0").strip() == "1"
        precision = _parse_int(precision_env_var, default=4)
        arc_segment = _parse_float(arc_segment_env_var, default=PI_OVER_2)
        return cls(
            stop_policy=stop_policy,  # type: ignore[arg-type]
            strict_capabilities=strict,
            svg_precision=precision,
            arc_segment_radians=arc_segment,
        )


def _parse_int(env_var: str, *, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be an integer; got {raw!r}") from exc


def _parse_float(env_var: str, *, default: float) -> float:
    raw = os.getenv(env_var, "").strip()
    if raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be a number; got {raw!r}") from exc
