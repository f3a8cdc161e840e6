import logging
from typing import Optional

from pysensonet.const import (OPERATIONMODE_TIME_CONTROLLED, QUICK_MODE_HEATING, QUICK_MODE_HOTWATER,
                              QUICK_MODE_NONE, STRATEGY_HEATING, STRATEGY_HOTWATER,
                              STRATEGY_HOTWATER_THEN_HEATING)
from pysensonet.models import DhwData, ZoneData

log = logging.getLogger(__name__)

HOTWATER_OFFSET_DEFAULT = -5.0  # required deficit below tapping setpoint unless hot water is the strategy


def hotwater_boost_possible(dhw: Optional[DhwData], strategy: int) -> bool:
    """
    A boost makes sense for a time controlled circuit whose temperature is
    below its tapping setpoint. With any strategy other than STRATEGY_HOTWATER
    the temperature must be at least 5 degrees below the setpoint.
    """
    if dhw is None:
        return False
    offset = 0.0 if strategy == STRATEGY_HOTWATER else HOTWATER_OFFSET_DEFAULT
    if dhw.operation_mode != OPERATIONMODE_TIME_CONTROLLED:
        return False
    if dhw.current_temperature is None or dhw.tapping_setpoint is None:
        return False
    return dhw.current_temperature < dhw.tapping_setpoint + offset


def heating_quick_veto_possible(zone: Optional[ZoneData]) -> bool:
    if zone is None:
        return False
    return zone.operation_mode == OPERATIONMODE_TIME_CONTROLLED


def which_quick_mode(dhw: Optional[DhwData], zone: Optional[ZoneData], strategy: int) -> int:
    """
    Decide which quick mode to start for a strategy.

    Args:
        dhw: Hot water projection (None if the system has no such circuit)
        zone: Zone projection (None if the system has no such zone)
        strategy: One of the STRATEGY_* constants

    Returns:
        QUICK_MODE_HOTWATER, QUICK_MODE_HEATING or QUICK_MODE_NONE
    """
    hotwater = hotwater_boost_possible(dhw, strategy)
    heating = heating_quick_veto_possible(zone)
    log.debug(f"Strategy = {strategy}, hotwater boost possible = {hotwater}, heating quick veto possible = {heating}")

    if strategy == STRATEGY_HOTWATER:
        if hotwater:
            return QUICK_MODE_HOTWATER
        log.debug("Strategy = hotwater, but hotwater boost not possible")
    elif strategy == STRATEGY_HEATING:
        if heating:
            return QUICK_MODE_HEATING
        log.debug("Strategy = heating, but zone quick veto not possible")
    elif strategy == STRATEGY_HOTWATER_THEN_HEATING:
        if hotwater:
            return QUICK_MODE_HOTWATER
        if heating:
            return QUICK_MODE_HEATING
        log.debug("Strategy = hotwater_then_heating, but both not possible")
    return QUICK_MODE_NONE
