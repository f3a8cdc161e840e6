import json
import logging
from datetime import datetime
from typing import Optional, Union

import requests
from dateutil import tz

from pysensonet.cloud.identity import BearerAuth
from pysensonet.const import (API_TIMEOUT, API_URL_BASE, DEVICES_URL, ENERGY_URL, HOMES_URL, HOTWATERBOOST_URL,
                              HOTWATERINDEX_DEFAULT, MPC_URL, RESOLUTIONS, SENSONET_HEADERS, SYSTEM_URL,
                              ZONEINDEX_DEFAULT, ZONEQUICKVETO_URL, ZONEVETODURATION_DEFAULT,
                              ZONEVETOSETPOINT_DEFAULT)
from pysensonet.exceptions import InvalidConfigurationParameter, RemoteError, SensonetConnectionError
from pysensonet.models import use_default
from pysensonet.pysensonet_base import PySensonetBase

log = logging.getLogger(__name__)


def format_date(value: datetime) -> str:
    """Format as YYYY-MM-DDTHH:MM:SS+HH:MM, treating naive datetimes as local time."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz.tzlocal())
    return value.isoformat(timespec='seconds')


# noinspection PyMethodMayBeStatic
class PySensonetCloud(PySensonetBase):
    """
    Thin client for the myVaillant end user API: one method per request.

    Args:
        token_source = Object with a token() method returning a bearer access token
        timeout = Seconds to wait for an API response
        session = requests.Session to use (one is created if omitted)
        url_base = API root URL
    """

    def __init__(self, token_source, timeout: int = API_TIMEOUT, session: Optional[requests.Session] = None,
                 url_base: str = API_URL_BASE):
        self.token_source = token_source
        self.timeout = timeout
        self.url_base = url_base.rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(SENSONET_HEADERS)
        self.session.auth = BearerAuth(token_source)

    def close_session(self):
        self.session.close()

    def _request(self, method: str, path: str, params: Optional[dict] = None,
                 payload: Optional[dict] = None) -> Optional[Union[dict, list]]:
        url = self.url_base + path
        write = method != 'GET'
        if payload is not None:
            log.debug(f" -- cloud: {method} {url} {json.dumps(payload)}")
        else:
            log.debug(f" -- cloud: {method} {url}")
        try:
            response = self.session.request(method, url, params=params, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            log.error(f"{method} {url} failed: {exc}")
            raise SensonetConnectionError(f"{method} {url} failed: {exc}") from exc
        if not 200 <= response.status_code < 300:
            if write:
                log.error(f"Code {response.status_code}: {response.text}")
            else:
                log.debug(f" -- cloud: Code {response.status_code}: {response.text}")
            raise RemoteError(response.status_code, response.text, url, method)
        if write and not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            if write:
                # Some write endpoints answer with a plain text acknowledgement
                return None
            raise RemoteError(response.status_code, response.text, url, method) from exc

    def get_homes(self) -> list:
        return self._request('GET', HOMES_URL)

    def get_system(self, system_id: str) -> dict:
        return self._request('GET', SYSTEM_URL.format(system_id=system_id))

    def get_system_devices(self, system_id: str) -> dict:
        return self._request('GET', DEVICES_URL.format(system_id=system_id))

    def get_energy_data(self, system_id: str, device_uuid: str, operation_mode: str, energy_type: str,
                        resolution: str, start: datetime, end: datetime) -> dict:
        if resolution not in RESOLUTIONS:
            raise InvalidConfigurationParameter(
                f"Invalid resolution '{resolution}' - must be one of {', '.join(RESOLUTIONS)}")
        params = {
            'resolution': resolution,
            'operationMode': operation_mode,
            'energyType': energy_type,
            'startDate': format_date(start),
            'endDate': format_date(end),
        }
        return self._request('GET', ENERGY_URL.format(system_id=system_id, device_uuid=device_uuid), params=params)

    def get_mpc_data(self, system_id: str) -> dict:
        return self._request('GET', MPC_URL.format(system_id=system_id))

    def start_zone_quick_veto(self, system_id: str, zone: Optional[int] = None, setpoint: Optional[float] = None,
                              duration: Optional[float] = None):
        zone = use_default(zone, ZONEINDEX_DEFAULT)
        payload = {
            'desiredRoomTemperatureSetpoint': use_default(setpoint, ZONEVETOSETPOINT_DEFAULT),
            'duration': use_default(duration, ZONEVETODURATION_DEFAULT),
        }
        return self._request('POST', ZONEQUICKVETO_URL.format(system_id=system_id, zone=zone), payload=payload)

    def stop_zone_quick_veto(self, system_id: str, zone: Optional[int] = None):
        zone = use_default(zone, ZONEINDEX_DEFAULT)
        return self._request('DELETE', ZONEQUICKVETO_URL.format(system_id=system_id, zone=zone))

    def start_hotwater_boost(self, system_id: str, index: Optional[int] = None):
        index = use_default(index, HOTWATERINDEX_DEFAULT)
        return self._request('POST', HOTWATERBOOST_URL.format(system_id=system_id, index=index), payload={})

    def stop_hotwater_boost(self, system_id: str, index: Optional[int] = None):
        index = use_default(index, HOTWATERINDEX_DEFAULT)
        return self._request('DELETE', HOTWATERBOOST_URL.format(system_id=system_id, index=index))
