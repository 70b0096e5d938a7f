from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EncoderConfig:
    dimension: int = 384
    price_ceiling: float = 1000.0
    # Tier breakpoints: budget < 100 <= mid < 500 <= premium < 1000 <= luxury
    price_breakpoints: tuple[float, float, float] = (100.0, 500.0, 1000.0)
    # Upper bound of the per-record noise that pads fallback vectors
    fallback_noise: float = 0.1


DEFAULT_ENCODER_CONFIG = EncoderConfig()
