# pySensonet Module
# -*- coding: utf-8 -*-
"""
 Python module to interface with Vaillant heat pumps through the myVaillant
 (sensonet) cloud API

 Features
    * Reads homes, system reports, devices, energy buckets and live power data
    * Starts and stops hot water boosts and zone quick vetos
    * Strategy based quick modes: pick a boost or a veto from the current system
      state and make sure only one quick mode is active at a time
    * Will cache responses (homes and devices 30m, system reports and mpc data 90s)
      to limit the number of calls to the API
    * Tracks the active quick mode locally, tolerating the delay before the
      API reports a change made by this library or by the myVaillant app
    * Uses a pluggable token source for the bearer token (static or refresh token)

 Classes
    Sensonet(client, token_source, timeout, homes_cache, systems_cache,
        devices_cache, mpc_cache, debounce, idle_grace, clock, logger)

 Parameters
    client = None                 # Remote API client (PySensonetBase), built from token_source if None
    token_source = None           # Object with token() returning a bearer access token
    timeout = 10                  # Timeout for HTTPS calls in seconds
    homes_cache = 1800            # Cache expiry for homes in seconds
    systems_cache = 90            # Cache expiry for system reports in seconds
    devices_cache = 1800          # Cache expiry for system devices in seconds
    mpc_cache = 90                # Cache expiry for mpc (live power) data in seconds
    debounce = None               # Seconds a local quick mode change wins over the API (systems_cache if None)
    idle_grace = 600              # Seconds an idle quick mode survives an empty system report
    clock = time.perf_counter     # Monotonic time source
    logger = None                 # Logger to use instead of the module logger

 Functions
    get_homes()                   # Return list of homes of the account
    get_system(system_id)         # Return system report (state, properties, configuration)
    get_system_devices(system_id) # Return device inventory of a system
    get_device_data(system_id, which)   # Return list of DeviceAndInfo (DEVICES_* filter)
    get_energy_data(system_id, device_uuid, operation_mode, energy_type, resolution, start, end)
                                  # Return energy buckets (not cached)
    get_mpc_data(system_id)       # Return live power data of the system devices
    get_system_current_power(system_id) # Return sum of the current power of all devices (W)
    outdoor_temperature(system_id)      # Return outdoor temperature
    hotwater_temperature(system_id, index)  # Return current hot water temperature
    zone_temperature(system_id, zone)   # Return current room temperature of a zone
    get_dhw_data(system_id, index)      # Return hot water projection (DhwData)
    get_zone_data(system_id, zone)      # Return zone projection (ZoneData)
    get_current_quickmode()       # Return the tracked quick mode
    start_strategybased(system_id, strategy, heating_par, hotwater_par)
                                  # Start a boost or veto according to strategy
    stop_strategybased(system_id, heating_par, hotwater_par)
                                  # Stop the quick mode started by start_strategybased()
    start_zone_quick_veto(system_id, zone, setpoint, duration)
    stop_zone_quick_veto(system_id, zone)
    start_hotwater_boost(system_id, index)
    stop_hotwater_boost(system_id, index)

 Requirements
    This module requires the following modules: requests, python-dateutil
    pip install requests python-dateutil
"""
import logging
import sys
import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

version_tuple = (0, 1, 0)
version = __version__ = '%d.%d.%d' % version_tuple
__author__ = 'pysensonet'

from pysensonet.cache import Cached
from pysensonet.cloud.identity import BearerAuth, RefreshTokenSource, StaticTokenSource
from pysensonet.cloud.pysensonet_cloud import PySensonetCloud
from pysensonet.const import (API_TIMEOUT, CACHE_DURATION_DEVICES, CACHE_DURATION_HOMES, CACHE_DURATION_MPCDATA,
                              CACHE_DURATION_SYSTEMS, DEVICES_ALL, DEVICES_BACKUP_HEATER, DEVICES_PRIMARY_HEATER,
                              DEVICES_SECONDARY_HEATER, IDLE_GRACE_PERIOD, QUICK_MODE_HEATING, QUICK_MODE_HOTWATER,
                              QUICKMODE_EMPTY, QUICKMODE_ERROR_ALREADYON, QUICKMODE_HEATING, QUICKMODE_HOTWATER,
                              QUICKMODE_NOTHING, STRATEGY_HEATING, STRATEGY_HOTWATER,
                              STRATEGY_HOTWATER_THEN_HEATING, STRATEGY_NONE)
from pysensonet.exceptions import (EmptyResultError, InvalidConfigurationParameter, NotFoundError,
                                   PySensonetException, RemoteError, SensonetConnectionError, TokenRefreshError)
from pysensonet.models import (DeviceAndInfo, DhwData, HeatingPar, HotwaterPar, ZoneData, get_hotwater_data,
                               get_zone_data, lookup)
from pysensonet.pysensonet_base import WRITE_OP_READ_OP_CACHE_MAP, PySensonetBase
from pysensonet.quickmode import QuickModeTracker
from pysensonet.strategy import which_quick_mode

log = logging.getLogger(__name__)
log.debug('%s version %s', __name__, __version__)
log.debug('Python %s on %s', sys.version, sys.platform)


def set_debug(toggle=True, color=True):
    """Enable verbose logging"""
    if toggle:
        if color:
            logging.basicConfig(format='\x1b[31;1m%(levelname)s:%(message)s\x1b[0m', level=logging.DEBUG)
        else:
            logging.basicConfig(format='%(levelname)s:%(message)s', level=logging.DEBUG)
        log.setLevel(logging.DEBUG)
        log.debug("%s [%s]\n" % (__name__, __version__))
    else:
        log.setLevel(logging.NOTSET)


# pylint: disable=too-many-public-methods
class Sensonet(object):
    def __init__(self, client: Optional[PySensonetBase] = None, token_source=None, timeout=API_TIMEOUT,
                 homes_cache=CACHE_DURATION_HOMES, systems_cache=CACHE_DURATION_SYSTEMS,
                 devices_cache=CACHE_DURATION_DEVICES, mpc_cache=CACHE_DURATION_MPCDATA, debounce=None,
                 idle_grace=IDLE_GRACE_PERIOD, clock: Callable[[], float] = time.perf_counter, logger=None):
        """
        Represents the heat pump systems of one myVaillant account.

        Args:
            client         = Remote API client (PySensonetBase)
            token_source   = Bearer token source, used to build a PySensonetCloud client if client is None
            timeout        = Timeout for HTTPS calls in seconds
            homes_cache    = Cache expiry for homes in seconds
            systems_cache  = Cache expiry for system reports in seconds
            devices_cache  = Cache expiry for system devices in seconds
            mpc_cache      = Cache expiry for mpc data in seconds
            debounce       = Seconds a local quick mode start/stop wins over a contradicting
                             system report (defaults to systems_cache)
            idle_grace     = Seconds an idle quick mode survives an empty system report
            clock          = Monotonic time source in seconds
            logger         = Logger to use instead of the module logger

        The tracked quick mode assumes a single logical caller per system:
        reading, reconciling and commanding are separate steps, so two threads
        running strategy commands for the same system at once may race.
        """
        self.log = logger or log
        if client is None:
            if token_source is None:
                raise InvalidConfigurationParameter("Either a client or a token source is required")
            client = PySensonetCloud(token_source, timeout=timeout)
        self.client = client
        self.clock = clock
        self.quickmode = QuickModeTracker(debounce=systems_cache if debounce is None else debounce,
                                          idle_grace=idle_grace, clock=clock)
        self._systems: List[dict] = []  # [{'systemId': ..., 'status': {...}}, ...] in homes order
        self._mpc_lock = threading.Lock()
        self._mpc_caches: Dict[str, Cached] = {}
        self.mpc_cache = mpc_cache
        self.caches = {
            'homes': Cached(self._fetch_homes, homes_cache, clock=clock, name='homes'),
            'systems': Cached(self._fetch_systems, systems_cache, clock=clock, name='systems'),
            'devices': Cached(self._fetch_devices, devices_cache, clock=clock, name='devices'),
        }
        self.log.debug(f"Sensonet facade created with client {type(client).__name__}")

    def close_session(self):
        self.client.close_session()

    # Cache fetch functions

    def _fetch_homes(self) -> list:
        homes = self.client.get_homes()
        if not homes:
            raise EmptyResultError("No homes found for this account")
        return homes

    def _fetch_systems(self) -> List[dict]:
        homes = self._fetch_homes()
        for i, home in enumerate(homes):
            system_id = home.get('systemId')
            entry = {'systemId': system_id, 'status': self.client.get_system(system_id)}
            if len(self._systems) <= i:
                self._systems.append(entry)
            else:
                self._systems[i] = entry
            # The quick mode is only derived from the first system
            if i == 0:
                self.quickmode.reconcile(entry['status'])
        del self._systems[len(homes):]
        return list(self._systems)

    def _fetch_devices(self) -> List[dict]:
        return [{'systemId': home.get('systemId'), 'devices': self.client.get_system_devices(home.get('systemId'))}
                for home in self._fetch_homes()]

    def _invalidate_cache(self, op: str):
        for cache_key in WRITE_OP_READ_OP_CACHE_MAP.get(op, []):
            self.caches[cache_key].reset()

    # Reads

    def get_homes(self) -> list:
        return self.caches['homes'].get()

    def get_system(self, system_id: str) -> dict:
        """Return the system report of system_id from the systems cache."""
        for entry in self.caches['systems'].get():
            if entry['systemId'] == system_id:
                return entry['status']
        raise NotFoundError(f"No data found for system {system_id}")

    def get_system_devices(self, system_id: str) -> dict:
        for entry in self.caches['devices'].get():
            if entry['systemId'] == system_id:
                return entry['devices']
        raise NotFoundError(f"No data found for system {system_id}")

    def get_device_data(self, system_id: str, which: int = DEVICES_ALL) -> List[DeviceAndInfo]:
        """
        Return the devices of a system tagged with their role.

        Args:
            system_id: System identifier
            which: DEVICES_ALL, DEVICES_PRIMARY_HEATER, DEVICES_SECONDARY_HEATER or DEVICES_BACKUP_HEATER
        """
        if which not in (DEVICES_ALL, DEVICES_PRIMARY_HEATER, DEVICES_SECONDARY_HEATER, DEVICES_BACKUP_HEATER):
            raise InvalidConfigurationParameter(f"Invalid device filter {which}")
        system_devices = self.get_system_devices(system_id) or {}
        devices = []
        primary = system_devices.get('primary_heat_generator') or {}
        if primary.get('device_uuid') and which in (DEVICES_PRIMARY_HEATER, DEVICES_ALL):
            devices.append(DeviceAndInfo(primary, 'primary_heat_generator'))
        if which in (DEVICES_SECONDARY_HEATER, DEVICES_ALL):
            for device in system_devices.get('secondary_heat_generators') or []:
                devices.append(DeviceAndInfo(device, 'secondary_heat_generator'))
        backup = system_devices.get('electric_backup_heater') or {}
        if backup.get('device_uuid') and which in (DEVICES_BACKUP_HEATER, DEVICES_ALL):
            devices.append(DeviceAndInfo(backup, 'electric_backup_heater'))
        return devices

    def get_energy_data(self, system_id: str, device_uuid: str, operation_mode: str, energy_type: str,
                        resolution: str, start: datetime, end: datetime) -> dict:
        return self.client.get_energy_data(system_id, device_uuid, operation_mode, energy_type, resolution,
                                           start, end)

    def get_mpc_data(self, system_id: str) -> dict:
        """Return the mpc data of system_id (cached per system of the account)."""
        if system_id not in self._mpc_caches and \
                system_id not in [home.get('systemId') for home in self.get_homes()]:
            raise NotFoundError(f"No data found for system {system_id}")
        with self._mpc_lock:
            cache = self._mpc_caches.get(system_id)
            if cache is None:
                cache = Cached(lambda: self.client.get_mpc_data(system_id), self.mpc_cache, clock=self.clock,
                               name=f'mpc {system_id}')
                self._mpc_caches[system_id] = cache
        return cache.get()

    def get_system_current_power(self, system_id: str) -> float:
        """Return the sum of currentPower over all devices of the mpc data (W)."""
        power = 0.0
        for device in (self.get_mpc_data(system_id) or {}).get('devices') or []:
            power += device.get('currentPower') or 0.0
        return power

    # Shortcut functions

    def outdoor_temperature(self, system_id: str) -> Optional[float]:
        return lookup(self.get_system(system_id), ('state', 'system', 'outdoorTemperature'))

    def get_dhw_data(self, system_id: str, index: Optional[int] = None) -> Optional[DhwData]:
        return get_hotwater_data(self.get_system(system_id), index)

    def get_zone_data(self, system_id: str, zone: Optional[int] = None) -> Optional[ZoneData]:
        return get_zone_data(self.get_system(system_id), zone)

    def hotwater_temperature(self, system_id: str, index: Optional[int] = None) -> Optional[float]:
        dhw = self.get_dhw_data(system_id, index)
        return dhw.current_temperature if dhw else None

    def zone_temperature(self, system_id: str, zone: Optional[int] = None) -> Optional[float]:
        zone_data = self.get_zone_data(system_id, zone)
        return zone_data.current_temperature if zone_data else None

    def get_current_quickmode(self) -> str:
        return self.quickmode.mode

    # Direct commands

    def start_zone_quick_veto(self, system_id: str, zone: Optional[int] = None, setpoint: Optional[float] = None,
                              duration: Optional[float] = None):
        self.client.start_zone_quick_veto(system_id, zone, setpoint, duration)
        if self.quickmode.mode != QUICKMODE_HOTWATER:
            self.quickmode.mark_started(QUICKMODE_HEATING)
        self._invalidate_cache('start_zone_quick_veto')

    def stop_zone_quick_veto(self, system_id: str, zone: Optional[int] = None):
        self.client.stop_zone_quick_veto(system_id, zone)
        if self.quickmode.mode != QUICKMODE_HOTWATER:
            self.quickmode.mark_stopped()
        self._invalidate_cache('stop_zone_quick_veto')

    def start_hotwater_boost(self, system_id: str, index: Optional[int] = None):
        self.client.start_hotwater_boost(system_id, index)
        self.quickmode.mark_started(QUICKMODE_HOTWATER)
        self._invalidate_cache('start_hotwater_boost')

    def stop_hotwater_boost(self, system_id: str, index: Optional[int] = None):
        self.client.stop_hotwater_boost(system_id, index)
        if self.quickmode.mode != QUICKMODE_HEATING:
            self.quickmode.mark_stopped()
        self._invalidate_cache('stop_hotwater_boost')

    # Strategy based commands

    def _refresh_system(self, system_id: str) -> dict:
        self.caches['systems'].reset()
        system = self.get_system(system_id)
        self.quickmode.reconcile(system)
        return system

    def start_strategybased(self, system_id: str, strategy: int, heating_par: Optional[HeatingPar] = None,
                            hotwater_par: Optional[HotwaterPar] = None) -> str:
        """
        Start a hot water boost or a zone quick veto, whichever the strategy
        and the current system state allow.

        Args:
            system_id: System identifier
            strategy: STRATEGY_NONE, STRATEGY_HOTWATER, STRATEGY_HEATING or STRATEGY_HOTWATER_THEN_HEATING
            heating_par: Zone quick veto parameters (defaults if None)
            hotwater_par: Hot water boost parameters (defaults if None)

        Returns:
            The tracked quick mode, or QUICKMODE_ERROR_ALREADYON (without sending
            any command) when a quick mode is already active.
        """
        heating_par = heating_par or HeatingPar()
        hotwater_par = hotwater_par or HotwaterPar()
        system = self._refresh_system(system_id)
        dhw = get_hotwater_data(system, hotwater_par.index)
        zone = get_zone_data(system, heating_par.zone_index)

        if self.quickmode.mode != QUICKMODE_EMPTY:
            self.log.debug(f"System is already in quick mode: {self.quickmode.mode}")
            self.log.debug(f"Special function of dhw: {dhw.current_special_function if dhw else None}")
            self.log.debug(f"Special function of heating zone: {zone.current_special_function if zone else None}")
            return QUICKMODE_ERROR_ALREADYON

        selected = which_quick_mode(dhw, zone, strategy)
        self.log.debug(f"which_quick_mode = {selected}")
        try:
            if selected == QUICK_MODE_HOTWATER:
                self.client.start_hotwater_boost(system_id, hotwater_par.index)
                self.quickmode.mark_started(QUICKMODE_HOTWATER)
                self.log.debug("Starting hotwater boost")
            elif selected == QUICK_MODE_HEATING:
                self.client.start_zone_quick_veto(system_id, heating_par.zone_index, heating_par.veto_setpoint,
                                                  heating_par.veto_duration)
                self.quickmode.mark_started(QUICKMODE_HEATING)
                self.log.debug("Starting zone quick veto")
            else:
                # No quick mode is tracked here (checked above), so there is nothing to stop
                self.quickmode.mark_started(QUICKMODE_NOTHING)
                self.log.debug("Enable called but no quick mode possible. Starting idle mode")
        finally:
            self.caches['systems'].reset()
        return self.quickmode.mode

    def stop_strategybased(self, system_id: str, heating_par: Optional[HeatingPar] = None,
                           hotwater_par: Optional[HotwaterPar] = None) -> str:
        """Stop whatever quick mode is tracked and return the (empty) tracked quick mode."""
        heating_par = heating_par or HeatingPar()
        hotwater_par = hotwater_par or HotwaterPar()
        self._refresh_system(system_id)
        mode = self.quickmode.mode
        try:
            if mode == QUICKMODE_HOTWATER:
                self.client.stop_hotwater_boost(system_id, hotwater_par.index)
                self.log.debug(f"Stopping quick mode {mode}")
            elif mode == QUICKMODE_HEATING:
                self.client.stop_zone_quick_veto(system_id, heating_par.zone_index)
                self.log.debug("Stopping zone quick veto")
            elif mode == QUICKMODE_NOTHING:
                self.log.debug("Stopping idle quick mode")
            else:
                self.log.debug("Nothing to do, no quick mode active")
            self.quickmode.mark_stopped()
        finally:
            self.caches['systems'].reset()
        return self.quickmode.mode
