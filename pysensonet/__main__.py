# pySensonet Module - Command Line Tool
# -*- coding: utf-8 -*-
"""
 Python module to interface with Vaillant heat pumps through the myVaillant
 (sensonet) cloud API

 Command Line Tool:
    python -m pysensonet <homes|status|devices|energy|boost|veto|strategy|version>

 Credentials are read from the environment (or a .env file):
    SENSONET_ACCESS_TOKEN     # Bearer access token
    SENSONET_REFRESH_TOKEN    # Refresh token (preferred - access tokens expire quickly)
    SENSONET_REALM            # Identity realm [Default=vaillant-germany-b2c]
    SENSONET_SYSTEM_ID        # System to use [Default=system of the first home]
    SENSONET_TIMEOUT          # Timeout for HTTPS calls in seconds [Default=10]
"""

import argparse
import json
import os
import sys
from datetime import datetime, timedelta

from dateutil.parser import isoparse
from dotenv import load_dotenv

# Modules
from pysensonet import (HeatingPar, HotwaterPar, PySensonetException, RefreshTokenSource, Sensonet,
                        StaticTokenSource, set_debug, version)
from pysensonet.const import API_TIMEOUT, DEVICES_ALL, REALM_GERMANY, RESOLUTION_DAY, RESOLUTIONS, STRATEGY_NAMES

# Global Variables
load_dotenv()
access_token = os.getenv("SENSONET_ACCESS_TOKEN", "")
refresh_token = os.getenv("SENSONET_REFRESH_TOKEN", "")
realm = os.getenv("SENSONET_REALM", REALM_GERMANY)
system_id = os.getenv("SENSONET_SYSTEM_ID", "")
timeout = int(os.getenv("SENSONET_TIMEOUT", API_TIMEOUT))

# Setup parser and groups
p = argparse.ArgumentParser(prog="PySensonet", description=f"PySensonet Module v{version}")
subparsers = p.add_subparsers(dest="command", title='commands (run <command> -h to see usage information)',
                              required=True)

homes_args = subparsers.add_parser("homes", help='List homes and systems of the account')

status_args = subparsers.add_parser("status", help='Get temperatures, operation modes and quick mode')
status_args.add_argument("-hotwater", type=int, default=None, help="Hot water index [Default=255]")
status_args.add_argument("-zone", type=int, default=None, help="Zone index [Default=0]")

devices_args = subparsers.add_parser("devices", help='List heat generators of the system')

energy_args = subparsers.add_parser("energy", help='Get energy data of a device')
energy_args.add_argument("-device", type=str, default=None,
                         help="Device UUID [Default=first device of the system]")
energy_args.add_argument("-operation", type=str, default="DOMESTIC_HOT_WATER",
                         help="Operation mode: DOMESTIC_HOT_WATER or HEATING [Default=DOMESTIC_HOT_WATER]")
energy_args.add_argument("-type", type=str, default="CONSUMED_ELECTRICAL_ENERGY",
                         help="Energy type [Default=CONSUMED_ELECTRICAL_ENERGY]")
energy_args.add_argument("-resolution", type=str, default=RESOLUTION_DAY,
                         help=f"Resolution: {', '.join(RESOLUTIONS)} [Default={RESOLUTION_DAY}]")
energy_args.add_argument("-start", type=str, default=None, help="Start date (ISO 8601) [Default=7 days ago]")
energy_args.add_argument("-end", type=str, default=None, help="End date (ISO 8601) [Default=now]")

boost_args = subparsers.add_parser("boost", help='Start or stop a hot water boost')
boost_args.add_argument("action", choices=["start", "stop"])
boost_args.add_argument("-index", type=int, default=None, help="Hot water index [Default=255]")

veto_args = subparsers.add_parser("veto", help='Start or stop a zone quick veto')
veto_args.add_argument("action", choices=["start", "stop"])
veto_args.add_argument("-zone", type=int, default=None, help="Zone index [Default=0]")
veto_args.add_argument("-setpoint", type=float, default=None, help="Room temperature setpoint [Default=20.0]")
veto_args.add_argument("-duration", type=float, default=None, help="Duration in hours [Default=0.5]")

strategy_args = subparsers.add_parser("strategy", help='Start or stop a strategy based quick mode')
strategy_args.add_argument("action", choices=["start", "stop"])
strategy_args.add_argument("-strategy", type=str, default="hotwater_then_heating",
                           help=f"Strategy: {', '.join(STRATEGY_NAMES)} [Default=hotwater_then_heating]")
strategy_args.add_argument("-hotwater", type=int, default=None, help="Hot water index [Default=255]")
strategy_args.add_argument("-zone", type=int, default=None, help="Zone index [Default=0]")
strategy_args.add_argument("-setpoint", type=float, default=None, help="Room temperature setpoint [Default=20.0]")
strategy_args.add_argument("-duration", type=float, default=None, help="Duration in hours [Default=0.5]")

version_args = subparsers.add_parser("version", help='Print version information')

# Add global flags
p.add_argument("-debug", action="store_true", default=False, help="Enable debug output")
p.add_argument("-format", type=str, default="text", choices=["text", "json"], help="Output format: text or json")
p.add_argument("-system", type=str, default=system_id, help="System ID [Default=SENSONET_SYSTEM_ID or first home]")

if len(sys.argv) == 1:
    p.print_help(sys.stderr)
    sys.exit(1)

# parse args
args = p.parse_args()
command = args.command

# Set Debug Mode
if args.debug:
    set_debug(True)


def show(output):
    if args.format == 'json':
        print(json.dumps(output, indent=2, default=str))
    elif isinstance(output, list):
        for item in output:
            print("  " + "  ".join(f"{value}" for value in item.values()))
        print("")
    else:
        # Table Output
        for item in output:
            name = item.replace("_", " ").title()
            print("  {:<24}{}".format(name, output[item]))
        print("")


def connect():
    if refresh_token:
        token_source = RefreshTokenSource(refresh_token, realm=realm, access_token=access_token or None)
    elif access_token:
        token_source = StaticTokenSource(access_token)
    else:
        print("ERROR: Set SENSONET_REFRESH_TOKEN or SENSONET_ACCESS_TOKEN (environment or .env file).")
        sys.exit(1)
    return Sensonet(token_source=token_source, timeout=timeout)


def select_system(sn):
    return args.system or sn.get_homes()[0].get('systemId')


if command == 'version':
    print("pySensonet [%s]" % version)
    sys.exit(0)

if args.format == 'text':
    print(f"pySensonet [{version}] - {command}\n")

sn = connect()
try:
    if command == 'homes':
        show([{'home': home.get('homeName'), 'system_id': home.get('systemId'),
               'product': home.get('productInformation'), 'firmware': home.get('firmwareVersion')}
              for home in sn.get_homes()])

    elif command == 'status':
        sid = select_system(sn)
        dhw = sn.get_dhw_data(sid, args.hotwater)
        zone = sn.get_zone_data(sid, args.zone)
        show({
            'system_id': sid,
            'outdoor_temperature': sn.outdoor_temperature(sid),
            'hotwater_temperature': dhw.current_temperature if dhw else None,
            'hotwater_setpoint': dhw.tapping_setpoint if dhw else None,
            'hotwater_mode': dhw.operation_mode if dhw else None,
            'zone_name': zone.name if zone else None,
            'zone_temperature': zone.current_temperature if zone else None,
            'zone_setpoint': zone.desired_setpoint if zone else None,
            'zone_mode': zone.operation_mode if zone else None,
            'current_power': sn.get_system_current_power(sid),
            'quick_mode': sn.get_current_quickmode() or "None",
        })

    elif command == 'devices':
        sid = select_system(sn)
        show([{'role': d.info, 'device_uuid': d.device_uuid, 'name': d.device.get('product_name')}
              for d in sn.get_device_data(sid, DEVICES_ALL)])

    elif command == 'energy':
        sid = select_system(sn)
        device = args.device
        if not device:
            devices = sn.get_device_data(sid, DEVICES_ALL)
            if not devices:
                print("ERROR: No devices found for system %s" % sid)
                sys.exit(1)
            device = devices[0].device_uuid
        end = isoparse(args.end) if args.end else datetime.now()
        start = isoparse(args.start) if args.start else end - timedelta(days=7)
        data = sn.get_energy_data(sid, device, args.operation, args.type, args.resolution.upper(), start, end)
        if args.format == 'json':
            show(data)
        else:
            print("  Total consumption: %s\n" % data.get('totalConsumption'))
            show([{'start': b.get('startDate'), 'end': b.get('endDate'), 'value': b.get('value')}
                  for b in data.get('data') or []])

    elif command == 'boost':
        sid = select_system(sn)
        if args.action == 'start':
            sn.start_hotwater_boost(sid, args.index)
        else:
            sn.stop_hotwater_boost(sid, args.index)
        show({'system_id': sid, 'hotwater_boost': args.action, 'quick_mode': sn.get_current_quickmode() or "None"})

    elif command == 'veto':
        sid = select_system(sn)
        if args.action == 'start':
            sn.start_zone_quick_veto(sid, args.zone, args.setpoint, args.duration)
        else:
            sn.stop_zone_quick_veto(sid, args.zone)
        show({'system_id': sid, 'zone_quick_veto': args.action, 'quick_mode': sn.get_current_quickmode() or "None"})

    elif command == 'strategy':
        sid = select_system(sn)
        heating_par = HeatingPar(zone_index=args.zone, veto_setpoint=args.setpoint, veto_duration=args.duration)
        hotwater_par = HotwaterPar(index=args.hotwater)
        if args.action == 'start':
            strategy = STRATEGY_NAMES.get(args.strategy.lower())
            if strategy is None:
                print("ERROR: Invalid Strategy [%s] - must be one of %s" % (args.strategy, ", ".join(STRATEGY_NAMES)))
                sys.exit(1)
            result = sn.start_strategybased(sid, strategy, heating_par, hotwater_par)
        else:
            result = sn.stop_strategybased(sid, heating_par, hotwater_par)
        show({'system_id': sid, 'strategy': args.action, 'quick_mode': result or "None"})

    else:
        p.print_help()
except PySensonetException as exc:
    print(f"ERROR: {exc}")
    sys.exit(1)
finally:
    sn.close_session()
