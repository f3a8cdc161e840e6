from pysensonet.models import (DomesticHotWaterData, get_dhw_data, get_hotwater_data, get_zone_data, lookup,
                               use_default)


def test_lookup():
    data = {'a': {'b': {'c': 1}}}
    assert lookup(data, ['a', 'b', 'c']) == 1
    assert lookup(data, ['a', 'x', 'c']) is None
    assert lookup(data, ['a', 'b', 'c', 'd']) is None


def test_use_default():
    assert use_default(None, 255) == 255
    assert use_default(-1, 20.0) == 20.0
    assert use_default(0, 255) == 0
    assert use_default(21.5, 20.0) == 21.5


def test_dhw_projection_joins_layers(make_system):
    dhw = get_dhw_data(make_system(dhw_temp=42.5, tapping_setpoint=55.0))
    assert dhw.index == 255
    assert dhw.current_temperature == 42.5
    assert dhw.tapping_setpoint == 55.0
    assert dhw.operation_mode == 'TIME_CONTROLLED'
    assert dhw.properties['maxSetpoint'] == 70


def test_zone_projection(make_system):
    zone = get_zone_data(make_system(zone_function='QUICK_VETO'), -1)
    assert zone.index == 0
    assert zone.name == 'Living Room'
    assert zone.current_special_function == 'QUICK_VETO'
    assert zone.current_temperature == 20.5
    assert zone.desired_setpoint == 21.0


def test_projection_missing_index(make_system):
    assert get_zone_data(make_system(), 3) is None
    assert get_dhw_data(make_system(), 1) is None


def test_projection_without_entries():
    assert get_dhw_data({'state': {'dhw': []}}) is None
    assert get_zone_data({}) is None


def test_domestic_hot_water_fallback():
    system = {
        'state': {'domesticHotWater': [{'index': 255, 'currentDomesticHotWaterTemperature': 46.0}]},
        'configuration': {'domesticHotWater': [{'index': 255, 'tappingSetpoint': 50.0,
                                                'operationModeDomesticHotWater': 'TIME_CONTROLLED'}]},
    }
    hotwater = get_hotwater_data(system)
    assert isinstance(hotwater, DomesticHotWaterData)
    assert hotwater.current_temperature == 46.0
    assert hotwater.operation_mode == 'TIME_CONTROLLED'
    assert hotwater.properties == {}
