"""
Engine tunables.

Every engine class also accepts these values directly as constructor
arguments; EngineConfig just groups them so a deployment can override them
from a YAML file:

    range:
      axis_margin: 0.02
    quote:
      impact_k: 100.0
    depth:
      max_levels: 15
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator


class RangeCfg(BaseModel):
    axis_margin: float = Field(0.02, ge=0, lt=1)       # Headroom around the visible window
    bound_gap: float = Field(0.01, ge=0, lt=1)         # Minimum relative gap between dragged bounds
    step: float = Field(0.02, gt=0, lt=1)              # Step button multiplier
    default_range_pct: float = Field(10.0, gt=0, lt=100)


class QuoteCfg(BaseModel):
    impact_k: float = Field(100.0, gt=0)
    depth_multiplier: float = Field(1000.0, gt=0)      # Pool depth proxy: balance * multiplier
    default_slippage_pct: float = Field(0.5, ge=0, le=100)
    slippage_warning_pct: float = Field(5.0, ge=0, le=100)
    impact_caution_pct: float = Field(1.0, ge=0, le=100)
    impact_high_pct: float = Field(5.0, ge=0, le=100)

    @model_validator(mode="after")
    def _check_tiers(self) -> QuoteCfg:
        if self.impact_caution_pct > self.impact_high_pct:
            raise ValueError("impact_caution_pct must not exceed impact_high_pct")
        return self


class DepthCfg(BaseModel):
    bin_size: Optional[float] = Field(None, gt=0)      # None = no bucketing
    max_levels: int = Field(25, ge=0)


class EngineConfig(BaseModel):
    range: RangeCfg = Field(default_factory=RangeCfg)
    quote: QuoteCfg = Field(default_factory=QuoteCfg)
    depth: DepthCfg = Field(default_factory=DepthCfg)


def load_config(path: Union[str, Path, None] = None) -> EngineConfig:
    """Load config from YAML. Missing path or empty file gives the defaults."""
    if path is None or not Path(path).exists():
        return EngineConfig()
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return EngineConfig(**data)
