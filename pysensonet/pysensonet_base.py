import abc
import logging
from datetime import datetime
from typing import Optional

log = logging.getLogger(__name__)

# Define which write API calls should invalidate which read API cache keys
WRITE_OP_READ_OP_CACHE_MAP = {
    'start_zone_quick_veto': ['systems'],
    'stop_zone_quick_veto': ['systems'],
    'start_hotwater_boost': ['systems'],
    'stop_hotwater_boost': ['systems'],
}


class PySensonetBase:
    """Remote API surface used by the Sensonet facade."""

    @abc.abstractmethod
    def close_session(self):
        raise NotImplementedError

    @abc.abstractmethod
    def get_homes(self) -> list:
        raise NotImplementedError

    @abc.abstractmethod
    def get_system(self, system_id: str) -> dict:
        raise NotImplementedError

    @abc.abstractmethod
    def get_system_devices(self, system_id: str) -> dict:
        raise NotImplementedError

    @abc.abstractmethod
    def get_energy_data(self, system_id: str, device_uuid: str, operation_mode: str, energy_type: str,
                        resolution: str, start: datetime, end: datetime) -> dict:
        raise NotImplementedError

    @abc.abstractmethod
    def get_mpc_data(self, system_id: str) -> dict:
        raise NotImplementedError

    @abc.abstractmethod
    def start_zone_quick_veto(self, system_id: str, zone: Optional[int] = None, setpoint: Optional[float] = None,
                              duration: Optional[float] = None):
        raise NotImplementedError

    @abc.abstractmethod
    def stop_zone_quick_veto(self, system_id: str, zone: Optional[int] = None):
        raise NotImplementedError

    @abc.abstractmethod
    def start_hotwater_boost(self, system_id: str, index: Optional[int] = None):
        raise NotImplementedError

    @abc.abstractmethod
    def stop_hotwater_boost(self, system_id: str, index: Optional[int] = None):
        raise NotImplementedError
