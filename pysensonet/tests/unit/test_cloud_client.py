from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

from pysensonet.cloud.identity import BearerAuth, StaticTokenSource
from pysensonet.cloud.pysensonet_cloud import PySensonetCloud, format_date
from pysensonet.const import API_URL_BASE, SENSONET_HEADERS
from pysensonet.exceptions import (InvalidConfigurationParameter, RemoteError, SensonetConnectionError)


def make_response(status_code=200, payload=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = text if text is not None else ("" if payload is None else str(payload))
    response.content = response.text.encode()
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture(name="session")
def fixture_session():
    session = MagicMock()
    session.headers = {}
    session.request.return_value = make_response(payload={})
    return session


@pytest.fixture(name="cloud")
def fixture_cloud(session):
    return PySensonetCloud(StaticTokenSource("token123"), session=session)


def test_session_setup(cloud, session):
    assert session.headers['x-app-identifier'] == SENSONET_HEADERS['x-app-identifier']
    assert isinstance(session.auth, BearerAuth)


def test_bearer_auth_header():
    prepared = requests.Request('GET', API_URL_BASE + '/homes').prepare()
    BearerAuth(StaticTokenSource("abc"))(prepared)
    assert prepared.headers['Authorization'] == 'Bearer abc'


def test_get_homes(cloud, session):
    session.request.return_value = make_response(payload=[{'systemId': 'sys-1'}])
    assert cloud.get_homes() == [{'systemId': 'sys-1'}]
    session.request.assert_called_once_with('GET', API_URL_BASE + '/homes', params=None, json=None, timeout=10)


def test_zone_quick_veto_defaults(cloud, session):
    cloud.start_zone_quick_veto('sys-1', -1, -1, -1)
    session.request.assert_called_once_with(
        'POST', API_URL_BASE + '/systems/sys-1/tli/zones/0/quick-veto', params=None,
        json={'desiredRoomTemperatureSetpoint': 20.0, 'duration': 0.5}, timeout=10)


def test_zone_quick_veto_values(cloud, session):
    cloud.start_zone_quick_veto('sys-1', 2, 21.5, 3.0)
    args, kwargs = session.request.call_args
    assert args[1].endswith('/zones/2/quick-veto')
    assert kwargs['json'] == {'desiredRoomTemperatureSetpoint': 21.5, 'duration': 3.0}


def test_stop_zone_quick_veto(cloud, session):
    session.request.return_value = make_response(text="")
    assert cloud.stop_zone_quick_veto('sys-1') is None
    session.request.assert_called_once_with(
        'DELETE', API_URL_BASE + '/systems/sys-1/tli/zones/0/quick-veto', params=None, json=None, timeout=10)


def test_hotwater_boost_default_index(cloud, session):
    cloud.start_hotwater_boost('sys-1', None)
    session.request.assert_called_once_with(
        'POST', API_URL_BASE + '/systems/sys-1/tli/domestic-hot-water/255/boost', params=None, json={},
        timeout=10)


def test_write_error_raises_remote_error(cloud, session):
    session.request.return_value = make_response(status_code=500, text="Internal Server Error")
    with pytest.raises(RemoteError) as exc_info:
        cloud.start_hotwater_boost('sys-1')
    assert exc_info.value.status == 500
    assert exc_info.value.body == "Internal Server Error"
    assert exc_info.value.method == 'POST'
    assert session.request.call_count == 1


def test_read_non_json_raises_remote_error(cloud, session):
    session.request.return_value = make_response(text="<html>maintenance</html>")
    with pytest.raises(RemoteError):
        cloud.get_system('sys-1')


def test_transport_error_is_wrapped(cloud, session):
    session.request.side_effect = requests.exceptions.ConnectTimeout("timed out")
    with pytest.raises(SensonetConnectionError):
        cloud.get_homes()


def test_energy_data_params(cloud, session):
    tz = timezone(timedelta(hours=2))
    cloud.get_energy_data('sys-1', 'dev-1', 'DOMESTIC_HOT_WATER', 'CONSUMED_ELECTRICAL_ENERGY', 'DAY',
                          datetime(2024, 6, 1, tzinfo=tz), datetime(2024, 6, 8, 12, 30, tzinfo=tz))
    args, kwargs = session.request.call_args
    assert args == ('GET', API_URL_BASE + '/emf/v2/sys-1/devices/dev-1/buckets')
    assert kwargs['params'] == {
        'resolution': 'DAY',
        'operationMode': 'DOMESTIC_HOT_WATER',
        'energyType': 'CONSUMED_ELECTRICAL_ENERGY',
        'startDate': '2024-06-01T00:00:00+02:00',
        'endDate': '2024-06-08T12:30:00+02:00',
    }


def test_energy_data_invalid_resolution(cloud, session):
    with pytest.raises(InvalidConfigurationParameter):
        cloud.get_energy_data('sys-1', 'dev-1', 'HEATING', 'CONSUMED_ELECTRICAL_ENERGY', 'WEEK',
                              datetime(2024, 6, 1), datetime(2024, 6, 8))
    session.request.assert_not_called()


def test_format_date_naive_is_local():
    formatted = format_date(datetime(2024, 1, 15, 8, 0, 0))
    assert formatted.startswith('2024-01-15T08:00:00')
    assert formatted[19] in '+-'
    assert formatted[-3] == ':'


def test_mpc_and_devices_urls(cloud, session):
    cloud.get_mpc_data('sys-1')
    assert session.request.call_args[0][1] == API_URL_BASE + '/hem/sys-1/mpc'
    cloud.get_system_devices('sys-1')
    assert session.request.call_args[0][1] == API_URL_BASE + '/emf/v2/sys-1/currentSystem'


def test_close_session(cloud, session):
    cloud.close_session()
    session.close.assert_called_once()
