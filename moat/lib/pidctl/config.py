"""
Configuration handling for `moat.lib.pidctl.Controller`.

A controller config looks like this::

    p: 0.1      # proportional gain
    i: 0.01     # integral gain
    d: 0.0      # derivative gain

    # output limits, both optional
    min: -5
    max: 5

    dt_min: 0.001  # shorter intervals don't get a derivative term
    set: 20        # initial setpoint

Missing values are taken from ``_cfg.yaml``, next to this file.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path as FSPath

from moat.util import attrdict, combine_dict, yload

from .errors import PIDConfigError

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import IO

__all__ = ["check_limits", "defaults", "load_cfg", "read_cfg"]

logger = logging.getLogger(__name__)


@lru_cache
def _defaults() -> attrdict:
    with (FSPath(__file__).parent / "_cfg.yaml").open("r") as f:
        return yload(f, attr=True)


def defaults() -> attrdict:
    "Return a copy of the default configuration."
    return attrdict(_defaults())


def check_limits(lower: float | None, upper: float | None) -> tuple[float, float]:
    """
    Convert output limits to floats. ``None`` is unbounded.

    Raises:
        PIDConfigError: if ``lower`` exceeds ``upper``.
    """
    lower = -float("inf") if lower is None else lower
    upper = float("inf") if upper is None else upper
    if lower > upper:
        raise PIDConfigError(f"Output limits reversed: min={lower} > max={upper}")
    return lower, upper


def load_cfg(cfg: Mapping | None = None) -> attrdict:
    """
    Merge a user configuration with the defaults and check it.

    Returns:
        a new `attrdict` with all keys present.

    Raises:
        PIDConfigError: unknown keys, reversed limits, or a negative ``dt_min``.
    """
    dfl = _defaults()
    if cfg is None:
        cfg = {}
    unknown = set(cfg) - set(dfl)
    if unknown:
        raise PIDConfigError(f"Unknown config keys: {' '.join(sorted(unknown))}")

    res = combine_dict(dict(cfg), dfl, cls=attrdict)
    check_limits(res.min, res.max)
    if res.dt_min < 0:
        raise PIDConfigError(f"dt_min must not be negative: {res.dt_min}")
    logger.debug("PID config: %r", res)
    return res


def read_cfg(stream: IO[str] | str) -> attrdict:
    """
    Read a YAML controller configuration.

    An empty document yields the defaults.
    """
    cfg = yload(stream, attr=True)
    if cfg is None:
        cfg = {}
    elif not isinstance(cfg, dict):
        raise PIDConfigError(f"Config must be a mapping, not {type(cfg).__name__}")
    return load_cfg(cfg)
