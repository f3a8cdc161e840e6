import pytest


class FakeClock:
    """Manually advanced replacement for time.perf_counter."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(name="clock")
def fixture_clock():
    return FakeClock()


@pytest.fixture(name="make_system")
def fixture_make_system():
    def make_system(dhw_temp=40.0, tapping_setpoint=50.0, dhw_mode='TIME_CONTROLLED', zone_mode='TIME_CONTROLLED',
                    dhw_function='REGULAR', zone_function='NONE'):
        return {
            'state': {
                'system': {'outdoorTemperature': 7.5, 'systemWaterPressure': 1.8},
                'zones': [{'index': 0, 'currentSpecialFunction': zone_function, 'currentRoomTemperature': 20.5,
                           'desiredRoomTemperatureSetpoint': 21.0}],
                'circuits': [{'index': 0}],
                'dhw': [{'index': 255, 'currentSpecialFunction': dhw_function, 'currentDhwTemperature': dhw_temp}],
            },
            'properties': {
                'zones': [{'index': 0, 'isActive': True}],
                'dhw': [{'index': 255, 'minSetpoint': 35, 'maxSetpoint': 70}],
            },
            'configuration': {
                'zones': [{'index': 0, 'general': {'name': 'Living Room'},
                           'heating': {'operationModeHeating': zone_mode}}],
                'dhw': [{'index': 255, 'tappingSetpoint': tapping_setpoint, 'operationModeDhw': dhw_mode}],
            },
        }
    return make_system
