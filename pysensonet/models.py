# pySensonet - Data Models
# -*- coding: utf-8 -*-
"""
 Projections over the raw system report returned by the sensonet API and
 the small parameter objects passed to the strategy based commands.

 The system report itself stays a plain dictionary (as decoded from JSON):

    {
        "state":         {"system": {...}, "zones": [...], "circuits": [...], "dhw": [...], "domesticHotWater": [...]},
        "properties":    {"system": {...}, "zones": [...], "circuits": [...], "dhw": [...], "domesticHotWater": [...]},
        "configuration": {"system": {...}, "zones": [...], "circuits": [...], "dhw": [...], "domesticHotWater": [...]}
    }

 Entries of each list carry an "index" that is unique within the list and
 ties the state, properties and configuration of one zone or hot water
 circuit together.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from pysensonet.const import HOTWATERINDEX_DEFAULT, ZONEINDEX_DEFAULT


def lookup(data, keylist):
    """
    Lookup a value in a nested dictionary or return None if not found.
        data - nested dictionary
        keylist - list of keys to traverse
    """
    for key in keylist:
        if isinstance(data, dict):
            data = data.get(key)
        else:
            return None
    return data


def use_default(value, default):
    """Return default when value is None (use default) or negative."""
    if value is None or value < 0:
        return default
    return value


@dataclass
class HeatingPar:
    """Zone quick veto parameters. None selects the API default."""
    zone_index: Optional[int] = None
    veto_setpoint: Optional[float] = None
    veto_duration: Optional[float] = None


@dataclass
class HotwaterPar:
    """Hot water boost parameters. None selects the API default."""
    index: Optional[int] = None


@dataclass
class DhwData:
    state: dict = field(default_factory=dict)
    properties: dict = field(default_factory=dict)
    configuration: dict = field(default_factory=dict)

    @property
    def index(self) -> Optional[int]:
        return self.state.get('index')

    @property
    def current_special_function(self) -> Optional[str]:
        return self.state.get('currentSpecialFunction')

    @property
    def current_temperature(self) -> Optional[float]:
        return self.state.get('currentDhwTemperature')

    @property
    def tapping_setpoint(self) -> Optional[float]:
        return self.configuration.get('tappingSetpoint')

    @property
    def operation_mode(self) -> Optional[str]:
        return self.configuration.get('operationModeDhw')


@dataclass
class DomesticHotWaterData(DhwData):
    """Same as DhwData for systems reporting the newer domesticHotWater circuits."""

    @property
    def current_temperature(self) -> Optional[float]:
        return self.state.get('currentDomesticHotWaterTemperature')

    @property
    def operation_mode(self) -> Optional[str]:
        return self.configuration.get('operationModeDomesticHotWater')


@dataclass
class ZoneData:
    state: dict = field(default_factory=dict)
    properties: dict = field(default_factory=dict)
    configuration: dict = field(default_factory=dict)

    @property
    def index(self) -> Optional[int]:
        return self.state.get('index')

    @property
    def name(self) -> Optional[str]:
        return lookup(self.configuration, ('general', 'name'))

    @property
    def current_special_function(self) -> Optional[str]:
        return self.state.get('currentSpecialFunction')

    @property
    def current_temperature(self) -> Optional[float]:
        return self.state.get('currentRoomTemperature')

    @property
    def desired_setpoint(self) -> Optional[float]:
        return self.state.get('desiredRoomTemperatureSetpoint')

    @property
    def operation_mode(self) -> Optional[str]:
        return lookup(self.configuration, ('heating', 'operationModeHeating'))


@dataclass
class DeviceAndInfo:
    device: dict
    info: str  # primary_heat_generator, secondary_heat_generator or electric_backup_heater

    @property
    def device_uuid(self) -> Optional[str]:
        return self.device.get('device_uuid')


def _find_index(entries, index: int) -> Optional[dict]:
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get('index') == index:
            return entry
    return None


def _project(system: dict, key: str, index: int, cls):
    state = _find_index(lookup(system, ('state', key)), index)
    if state is None:
        return None
    return cls(state=state,
               properties=_find_index(lookup(system, ('properties', key)), index) or {},
               configuration=_find_index(lookup(system, ('configuration', key)), index) or {})


def get_dhw_data(system: dict, index: Optional[int] = None) -> Optional[DhwData]:
    """Join the state, properties and configuration of one dhw circuit (None if absent)."""
    return _project(system, 'dhw', use_default(index, HOTWATERINDEX_DEFAULT), DhwData)


def get_domestic_hot_water_data(system: dict, index: Optional[int] = None) -> Optional[DomesticHotWaterData]:
    return _project(system, 'domesticHotWater', use_default(index, HOTWATERINDEX_DEFAULT), DomesticHotWaterData)


def get_hotwater_data(system: dict, index: Optional[int] = None) -> Optional[Union[DhwData, DomesticHotWaterData]]:
    """Hot water projection from the dhw list, falling back to domesticHotWater."""
    return get_dhw_data(system, index) or get_domestic_hot_water_data(system, index)


def get_zone_data(system: dict, index: Optional[int] = None) -> Optional[ZoneData]:
    return _project(system, 'zones', use_default(index, ZONEINDEX_DEFAULT), ZoneData)
