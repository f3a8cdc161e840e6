# Example: pySensonet Usage Demo
# ------------------------------
# This script demonstrates how to read a Vaillant heat pump system through the
# myVaillant cloud API using the pySensonet library.
#
# Usage:
#   - Put your tokens in a .env file (or the environment):
#       SENSONET_REFRESH_TOKEN, SENSONET_REALM, SENSONET_SYSTEM_ID
#   - Run: python example.py

import os

import dotenv

import pysensonet

# Load environment variables from .env file if present
dotenv.load_dotenv()

# Enable debug logging for more verbose output (optional for learning)
# pysensonet.set_debug(True)

tokens = pysensonet.RefreshTokenSource(os.getenv('SENSONET_REFRESH_TOKEN', ''),
                                       realm=os.getenv('SENSONET_REALM', pysensonet.const.REALM_GERMANY))
sn = pysensonet.Sensonet(token_source=tokens)

# --- Homes ---
homes = sn.get_homes()
for home in homes:
    print("Home: %s - System: %s - Firmware: %s" % (home.get('homeName'), home.get('systemId'),
                                                     home.get('firmwareVersion')))
system_id = os.getenv('SENSONET_SYSTEM_ID') or homes[0]['systemId']
print("")

# --- Temperatures ---
print("Outdoor temperature: %s" % sn.outdoor_temperature(system_id))
print("Hot water temperature: %s" % sn.hotwater_temperature(system_id))
print("Room temperature (zone 0): %s" % sn.zone_temperature(system_id))
print("Current power: %0.1fW" % sn.get_system_current_power(system_id))
print("")

# --- Devices ---
for device in sn.get_device_data(system_id):
    print("%-26s %s" % (device.info, device.device_uuid))
print("")

# --- Quick mode ---
print("Tracked quick mode: %r" % sn.get_current_quickmode())

# Uncomment to start (and stop) a strategy based quick mode
# print(sn.start_strategybased(system_id, pysensonet.STRATEGY_HOTWATER_THEN_HEATING))
# print(sn.stop_strategybased(system_id))

# Keep the rotated refresh token for the next run
print("Token data: %r" % tokens.to_dict())
sn.close_session()
