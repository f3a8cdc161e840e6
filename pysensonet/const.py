# pySensonet - Constants
# -*- coding: utf-8 -*-
"""
 Fixed values of the myVaillant (sensonet) end user API: URLs, request
 headers, parameter defaults, quick mode names and strategy codes.
"""

# Identity provider
CLIENT_ID = "myvaillant"
REDIRECT_URL = "enduservaillant.page.link://login"
REALM_GERMANY = "vaillant-germany-b2c"

AUTH_BASE_URL = "https://identity.vaillant-group.com/auth/realms"
TOKEN_URL = AUTH_BASE_URL + "/{realm}/protocol/openid-connect/token"
AUTH_URL = AUTH_BASE_URL + "/{realm}/protocol/openid-connect/auth"

# API endpoints (relative to API_URL_BASE)
API_URL_BASE = "https://api.vaillant-group.com/service-connected-control/end-user-app-api/v1"
HOMES_URL = "/homes"
SYSTEM_URL = "/systems/{system_id}/tli"
HOTWATERBOOST_URL = "/systems/{system_id}/tli/domestic-hot-water/{index}/boost"
ZONEQUICKVETO_URL = "/systems/{system_id}/tli/zones/{zone}/quick-veto"
DEVICES_URL = "/emf/v2/{system_id}/currentSystem"
ENERGY_URL = "/emf/v2/{system_id}/devices/{device_uuid}/buckets"
MPC_URL = "/hem/{system_id}/mpc"

# Headers required by the API gateway on every request
SENSONET_HEADERS = {
    "Accept-Language": "en-GB",
    "Accept": "application/json, text/plain, */*",
    "x-app-identifier": "VAILLANT",
    "x-client-locale": "en-GB",
    "x-idm-identifier": "KEYCLOAK",
    "ocp-apim-subscription-key": "1e0a2f3511fb4c5bbb1c7f9fedd20b1c",
}

API_TIMEOUT = 10  # seconds to wait for an API response

# Defaults used when a caller passes None (or a negative value)
HOTWATERINDEX_DEFAULT = 255
ZONEINDEX_DEFAULT = 0
ZONEVETOSETPOINT_DEFAULT = 20.0
ZONEVETODURATION_DEFAULT = 0.5

OPERATIONMODE_TIME_CONTROLLED = "TIME_CONTROLLED"

# Special function markers reported in the system state
SPECIAL_FUNCTION_CYLINDER_BOOST = "CYLINDER_BOOST"
SPECIAL_FUNCTION_QUICK_VETO = "QUICK_VETO"

# Tracked quick modes
QUICKMODE_EMPTY = ""
QUICKMODE_HOTWATER = "Hotwater Boost"
QUICKMODE_HEATING = "Heating Quick Veto"
QUICKMODE_NOTHING = "Charger running idle"
QUICKMODE_ERROR_ALREADYON = "Error. A quickmode is already running"

# Result of the strategy selector
QUICK_MODE_NONE = 0
QUICK_MODE_HOTWATER = 1
QUICK_MODE_HEATING = 2

# Strategies
STRATEGY_NONE = 0
STRATEGY_HOTWATER = 1
STRATEGY_HEATING = 2
STRATEGY_HOTWATER_THEN_HEATING = 3

STRATEGY_NAMES = {
    "none": STRATEGY_NONE,
    "hotwater": STRATEGY_HOTWATER,
    "heating": STRATEGY_HEATING,
    "hotwater_then_heating": STRATEGY_HOTWATER_THEN_HEATING,
}

# Device filters for Sensonet.get_device_data()
DEVICES_ALL = 0
DEVICES_PRIMARY_HEATER = 1
DEVICES_SECONDARY_HEATER = 2
DEVICES_BACKUP_HEATER = 3

# Energy data resolutions
RESOLUTION_HOUR = "HOUR"
RESOLUTION_DAY = "DAY"
RESOLUTION_MONTH = "MONTH"
RESOLUTIONS = (RESOLUTION_HOUR, RESOLUTION_DAY, RESOLUTION_MONTH)

# Cache durations in seconds
CACHE_DURATION_HOMES = 1800
CACHE_DURATION_SYSTEMS = 90
CACHE_DURATION_DEVICES = 1800
CACHE_DURATION_MPCDATA = 90

# Quick mode tracking
IDLE_GRACE_PERIOD = 600  # keep a locally set idle mode at least this long
QUICKMODE_STOPPED_OFFSET = 120  # initial 'stopped' timestamp lies this far in the past
