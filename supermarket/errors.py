# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# errors.py
# -----------------------------------------------------------------------------
# Purpose:
#   Exception taxonomy for the checkout simulation.
#
# Design notes:
#   - ConfigurationError is raised while building the model, never once the
#     event loop is running.
#   - InvalidScheduleError is a contract violation by a process model.
#   - UnknownEventError is only raised on request (strict cancellation).
# -----------------------------------------------------------------------------

from __future__ import annotations


class SimulationError(Exception):
    """Base class for every error raised by the simulation core."""


class ConfigurationError(SimulationError, ValueError):
    """Invalid server count, arrival mean, strategy or distribution bounds."""


class InvalidScheduleError(SimulationError, ValueError):
    """An event was scheduled strictly before the current clock."""


class UnknownEventError(SimulationError, LookupError):
    """Cancel was called on an event that is not pending."""
