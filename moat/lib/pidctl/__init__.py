"""
This library contains a [PID controller](https://en.wikipedia.org/wiki/Proportional%E2%80%93integral%E2%80%93derivative_controller)
that works on the measured process value.

The `Controller` class implements
- timing independence (wall-clock or caller-supplied time)
- a derivative term computed from the measurement, so setpoint changes
  don't cause a spike
- wind-up protection by limiting the integral to the output range
- introspection
- saving and restoring the controller's state

Usage::

    pid = Controller(Kp=1.0, Ki=0.1, Kd=0.05, upper=100, lower=0)
    pid.setpoint = 55
    while True:
        pid.current = read_temperature()
        set_heater(pid.output())
"""

from __future__ import annotations

from ._impl import DT_MIN as DT_MIN
from ._impl import Controller as Controller
from ._impl import clamp as clamp
from .errors import NotANumberError as NotANumberError
from .errors import PIDConfigError as PIDConfigError
from .errors import PIDError as PIDError
from .errors import TimeWentBackwardsError as TimeWentBackwardsError

__all__ = [
    "DT_MIN",
    "Controller",
    "NotANumberError",
    "PIDConfigError",
    "PIDError",
    "TimeWentBackwardsError",
    "clamp",
]
