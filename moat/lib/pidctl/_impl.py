#
# PID controller with derivative-on-measurement and integral clamping.
#

from __future__ import annotations

import logging
from math import isnan
from time import monotonic

from moat.util import NotGiven

from .config import check_limits, load_cfg
from .errors import NotANumberError, PIDConfigError, TimeWentBackwardsError

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import EllipsisType

    from collections.abc import Callable, Mapping, Sequence

__all__ = ["DT_MIN", "Controller", "clamp"]

logger = logging.getLogger(__name__)

# Intervals shorter than this (seconds) don't get a derivative term.
DT_MIN = 0.001


def clamp(value: float, lower: float, upper: float) -> float:
    """
    Limit ``value`` to ``lower``…``upper``.

    The lower limit is checked first. NaN is returned unchanged;
    `Controller` refuses NaN before it gets here.
    """
    if value <= lower:
        return lower
    if value >= upper:
        return upper
    return value


class Controller:
    """
    A PID controller working on the measured process value.

    The caller feeds measurements by assigning to `current` and reads
    the control signal by calling `output`. The time between two
    computations is taken from ``clock`` (default: `time.monotonic`),
    or passed in explicitly.

    The derivative term uses the change of the measurement, not of the
    error, so changing the setpoint doesn't cause a spike. The integral
    term is kept within the output limits.
    """

    t: float | None = None  # time of the last computation
    t_start: float  # construction / reset time
    split: tuple[float, float, float] | None = None  # last p,i,d

    _Kp: float = 0
    _Ki: float = 0
    _Kd: float = 0

    _current: float = 0
    _last: float = 0
    _integral: float = 0
    _setpoint: float = 0

    def __init__(
        self,
        Kp: float = 0,
        Ki: float = 0,
        Kd: float = 0,
        upper: float | None = None,
        lower: float | None = None,
        *,
        clock: Callable[[], float] | None = None,
        dt_min: float = DT_MIN,
        t: float | None = None,
    ):
        """
        Args:
            Kp: proportional gain.
            Ki: integral gain.
            Kd: derivative gain.
            upper: upper output limit, `None` for unbounded.
            lower: lower output limit, `None` for unbounded.
            clock: time source, returning seconds.
            dt_min: minimum interval for computing a derivative term.
            t: the current time, if not taken from ``clock``.

        Raises:
            PIDConfigError: ``lower`` is larger than ``upper``, or
                ``dt_min`` is negative.
        """
        self._lower, self._upper = check_limits(lower, upper)
        if dt_min < 0:
            raise PIDConfigError(f"dt_min must not be negative: {dt_min}")
        self.dt_min = dt_min
        self.clock = monotonic if clock is None else clock
        self.set_gains(Kp, Ki, Kd)
        self.t_start = self.clock() if t is None else t

    @classmethod
    def from_cfg(
        cls,
        cfg: Mapping | None = None,
        clock: Callable[[], float] | None = None,
        t: float | None = None,
    ) -> Controller:
        """
        Create a controller from a config mapping.

        See `moat.lib.pidctl.config` for the keys.
        """
        cfg = load_cfg(cfg)
        pid = cls(
            cfg.p,
            cfg.i,
            cfg.d,
            cfg.max,
            cfg.min,
            clock=clock,
            dt_min=cfg.dt_min,
            t=t,
        )
        pid.setpoint = cfg.set
        return pid

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} P={self._Kp} I={self._Ki} D={self._Kd}"
            f" [{self._lower}:{self._upper}] sp={self.setpoint} pv={self._current}>"
        )

    @property
    def Kp(self) -> float:  # noqa:D102
        return self._Kp

    @property
    def Ki(self) -> float:  # noqa:D102
        return self._Ki

    @property
    def Kd(self) -> float:  # noqa:D102
        return self._Kd

    def get_gains(self) -> tuple[float, float, float]:
        """Get the gains (Kp, Ki, Kd)."""
        return self._Kp, self._Ki, self._Kd

    def set_gains(
        self, Kp: float | None = None, Ki: float | None = None, Kd: float | None = None
    ) -> None:
        """Change the controller's gains.

        A gain that's `None` is not changed. The new values take effect
        with the next computation; the accumulated integral is kept.
        """
        if Kp is not None:
            self._Kp = Kp
        if Ki is not None:
            self._Ki = Ki
        if Kd is not None:
            self._Kd = Kd

    @property
    def lower(self) -> float:
        "lower output limit"
        return self._lower

    @property
    def upper(self) -> float:
        "upper output limit"
        return self._upper

    def get_output_limits(self) -> tuple[float, float]:
        """Get the output limits (lower, upper)."""
        return self._lower, self._upper

    @property
    def current(self) -> float:
        """
        The current process value.

        Setting this moves the previous value to `last`.
        """
        return self._current

    @current.setter
    def current(self, value: float):
        if isnan(value):
            raise NotANumberError("current", value)
        self._last = self._current
        self._current = value

    @property
    def setpoint(self) -> float:
        """
        The desired process value.

        Takes effect with the next computation.
        """
        return self._setpoint

    @setpoint.setter
    def setpoint(self, value: float):
        if isnan(value):
            raise NotANumberError("setpoint", value)
        self._setpoint = value

    @property
    def last(self) -> float:
        "The previous process value."
        return self._last

    @property
    def integral(self) -> float:
        "The accumulated integral term."
        return self._integral

    def get_state(self) -> tuple[float | None, float, float, float]:
        """Get the controller's state.

        Returns:
            (t, current, last, integral)
        """
        return self.t, self._current, self._last, self._integral

    def set_state(
        self,
        t: float | None | EllipsisType = None,
        current: float | None = None,
        last: float | None = None,
        integral: float | None = None,
    ) -> None:
        """Restore the controller's state.

        Arguments that are `None` are not changed.

        Args:
            t: time of the last computation. `NotGiven` clears it, so
               that the next interval is measured from `t_start`.
            current: current process value. Does not affect `last`.
            last: previous process value.
            integral: the integral term.
        """
        if t is NotGiven:
            self.t = None
        elif t is not None:
            self.t = t
        if current is not None:
            self._current = current
        if last is not None:
            self._last = last
        if integral is not None:
            self._integral = integral

    def reset(self, t: float | None = None) -> None:
        """
        Clear the integral and restart time measurement.

        Args:
            t: the current time, if not taken from the clock.
        """
        self._integral = 0
        self.split = None
        self.t = None
        self.t_start = self.clock() if t is None else t

    def integrate(self, t: float | None = None) -> tuple[float, float, float]:
        """Run the controller's state forward to ``t``.

        Args:
            t: current time, or `None` to ask the clock.

        Returns:
            p,i,d: the control signal's parts, *not* limited.
            The output is ``p + i - d``; see `sum`.

        Raises:
            TimeWentBackwardsError: ``t`` is earlier than the last
                computation. The controller uses ``t`` as its new base.
            NotANumberError: a term evaluated to NaN. The integral is
                not changed; the controller uses ``t`` as its new base.
        """
        if t is None:
            t = self.clock()
        t0 = self.t_start if self.t is None else self.t
        self.t = t
        dt = t - t0
        if dt < 0:
            logger.warning("Time went backwards: %s < %s", t, t0)
            raise TimeWentBackwardsError(t, t0)

        error = self.setpoint - self._current

        i = self._integral + self._Ki * error * dt
        i = clamp(i, self._lower, self._upper)

        if dt <= 0 or dt < self.dt_min:
            logger.debug("dt=%s too short, no derivative", dt)
            d = 0.0
        else:
            d = self._Kd * (self._current - self._last) / dt

        p = self._Kp * error

        if isnan(p) or isnan(i) or isnan(d):
            logger.warning("PID term is NaN: e=%g p=%g i=%g d=%g", error, p, i, d)
            raise NotANumberError("p/i/d", (p, i, d))

        logger.debug("PID dt=%.4f e=%g p=%g i=%g d=%g", dt, error, p, i, d)
        self._integral = i
        self.split = res = (p, i, d)
        return res

    def sum(self, args: Sequence[float]) -> float:
        """
        Combine the result of `integrate` and limit it.

        ``self.output(t)`` ≍ ``self.sum(self.integrate(t))``

        Raises:
            NotANumberError: the parts add up to NaN, e.g. ``inf - inf``.
        """
        p, i, d = args
        res = p + i - d
        if isnan(res):
            raise NotANumberError("output", tuple(args))
        return clamp(res, self._lower, self._upper)

    def output(self, t: float | None = None) -> float:
        """Compute the control signal.

        This is not idempotent: each call advances the controller's
        time and integral.

        Args:
            t: current time, or `None` to ask the clock.

        Returns:
            the new output, within `lower`…`upper`.
        """
        return self.sum(self.integrate(t))

    def __call__(self, value: float, t: float | None = None) -> float:
        """Feed a new measurement and compute the control signal.

        Args:
            value: the current process value.
            t: current time, or `None` to ask the clock.
        """
        self.current = value
        return self.output(t)
