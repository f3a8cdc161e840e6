# pySensonet - Quick Mode Tracking
# -*- coding: utf-8 -*-
"""
 Local approximation of the quick mode (hot water boost or zone quick veto)
 that is currently active on a system.

 The API has no notion of "the" quick mode: it reports special functions on
 individual hot water circuits and zones, and both this library and the
 vendor app may start or stop them at any time. QuickModeTracker derives
 the active mode from each fresh system report and remembers when a mode
 was started or stopped, so that a report fetched shortly before a local
 command does not immediately undo what the command set.

 Single logical caller per system: observe/reconcile/mark_* are not atomic
 as a sequence, so concurrent strategy calls for the same system may race.
"""

import logging
import time
from typing import Callable, Optional

from pysensonet.const import (CACHE_DURATION_SYSTEMS, IDLE_GRACE_PERIOD, QUICKMODE_EMPTY, QUICKMODE_HEATING,
                              QUICKMODE_HOTWATER, QUICKMODE_NOTHING, QUICKMODE_STOPPED_OFFSET,
                              SPECIAL_FUNCTION_CYLINDER_BOOST, SPECIAL_FUNCTION_QUICK_VETO)
from pysensonet.models import lookup

log = logging.getLogger(__name__)


def observe_quick_mode(system: Optional[dict]) -> str:
    """Quick mode reported by a system report (QUICKMODE_EMPTY if none)."""
    if not system:
        return QUICKMODE_EMPTY
    for key in ('dhw', 'domesticHotWater'):
        for dhw in lookup(system, ('state', key)) or []:
            if dhw.get('currentSpecialFunction') == SPECIAL_FUNCTION_CYLINDER_BOOST:
                return QUICKMODE_HOTWATER
    for zone in lookup(system, ('state', 'zones')) or []:
        if zone.get('currentSpecialFunction') == SPECIAL_FUNCTION_QUICK_VETO:
            return QUICKMODE_HEATING
    return QUICKMODE_EMPTY


class QuickModeTracker:
    """
    Tracks the quick mode of one system.

    Args:
        debounce = Seconds a local start/stop is trusted over a contradicting report
                   (defaults to the systems cache duration)
        idle_grace = Seconds an idle mode set by this library survives an empty report
        clock = Monotonic time source (seconds)
    """

    def __init__(self, debounce: float = CACHE_DURATION_SYSTEMS, idle_grace: float = IDLE_GRACE_PERIOD,
                 clock: Callable[[], float] = time.perf_counter):
        self.debounce = debounce
        self.idle_grace = idle_grace
        self.clock = clock
        self.mode = QUICKMODE_EMPTY  # assume no quick mode is active
        self.started = self.clock()
        # In the past, so the first reconcile() may adopt a reported mode right away
        self.stopped = self.started - QUICKMODE_STOPPED_OFFSET

    def reconcile(self, system: Optional[dict]) -> str:
        """Update the tracked mode from a fresh system report and return it."""
        observed = observe_quick_mode(system)
        if observed == self.mode:
            return self.mode
        now = self.clock()
        if observed == QUICKMODE_EMPTY:
            if now - self.started < self.debounce:
                log.debug(f"Quick mode '{self.mode}' not reported, but started less than {self.debounce}s ago")
            elif self.mode == QUICKMODE_NOTHING and now - self.started < self.idle_grace:
                log.debug(f"Idle mode active for less than {self.idle_grace}s. Keeping the idle mode")
            else:
                log.debug(f"Old quickmode: '{self.mode}'   New quickmode: '{observed}'")
                self.mode = observed
                self.stopped = now
        elif now - self.stopped >= self.debounce:
            log.debug(f"Old quickmode: '{self.mode}'   New quickmode: '{observed}'")
            self.mode = observed
            self.started = now
        else:
            log.debug(f"Quick mode '{observed}' reported, but a quick mode was stopped less than {self.debounce}s ago")
        return self.mode

    def mark_started(self, mode: str):
        self.mode = mode
        self.started = self.clock()

    def mark_stopped(self):
        self.mode = QUICKMODE_EMPTY
        self.stopped = self.clock()
