"""
Errors raised by the PID controller.
"""

from __future__ import annotations

__all__ = ["NotANumberError", "PIDConfigError", "PIDError", "TimeWentBackwardsError"]


class PIDError(Exception):
    "Base class for PID controller errors"


class PIDConfigError(PIDError, ValueError):
    """
    The controller's configuration is unusable,
    e.g. the lower output limit exceeds the upper one.
    """


class TimeWentBackwardsError(PIDError, ValueError):
    """
    The time source returned an earlier instant than the last computation.

    The controller has already been resynchronized to the new time when
    this is raised.
    """

    def __init__(self, t, t0):
        super().__init__(t, t0)
        self.t = t
        self.t0 = t0

    def __str__(self):
        return f"Time went backwards: {self.t} < {self.t0}"


class NotANumberError(PIDError, ValueError):
    """
    A value or a computed term is NaN.

    The controller's integral is not changed when this is raised.
    """

    def __init__(self, what, value):
        super().__init__(what, value)
        self.what = what
        self.value = value

    def __str__(self):
        return f"NaN in {self.what}: {self.value!r}"
