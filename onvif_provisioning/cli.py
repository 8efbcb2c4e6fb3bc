"""ONVIF camera provisioning tool.

Discovers the services a device advertises, then runs one command against
the matching capability.

Usage:
    onvif-provisioning --uri http://192.168.1.100/ get-system-date-and-time
    onvif-provisioning --uri http://192.168.1.100/ --username admin --password secret get-service-capabilities
    onvif-provisioning --uri http://192.168.1.100/ pan-move --direction right
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from zeep.helpers import serialize_object

from onvif_provisioning.config import Settings, get_settings
from onvif_provisioning.exceptions import DiscoveryError, MissingBaseAddress
from onvif_provisioning.schemas.device import DeviceTarget
from onvif_provisioning.services.onvif import operations
from onvif_provisioning.services.onvif.capabilities import CapabilitySet
from onvif_provisioning.services.onvif.client import ClientFactory
from onvif_provisioning.services.onvif.discovery import discover
from onvif_provisioning.services.onvif.dispatcher import (
    CapabilityResult,
    CommandDispatcher,
    ResultStatus,
)
from onvif_provisioning.services.onvif.registry import CapabilitySlot

logger = logging.getLogger("onvif_provisioning")

# Provisioning is reported first, then the device services.
REPORT_ORDER = (
    CapabilitySlot.PROVISIONING,
    CapabilitySlot.DEVICEMGMT,
    CapabilitySlot.EVENTS,
    CapabilitySlot.DEVICEIO,
    CapabilitySlot.MEDIA,
    CapabilitySlot.MEDIA2,
    CapabilitySlot.IMAGING,
    CapabilitySlot.PTZ,
    CapabilitySlot.ANALYTICS,
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onvif-provisioning",
        description="ONVIF camera provisioning tool.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    onvif-provisioning --uri http://192.168.1.100/ capabilities
    onvif-provisioning --uri http://192.168.1.100/ get-service-capabilities
    onvif-provisioning --uri http://192.168.1.100/ pan-move --direction right

Options default to ONVIF_URI, ONVIF_USERNAME, ONVIF_PASSWORD, ... from the
environment or a .env file.
""",
    )
    parser.add_argument(
        "--uri",
        help="The device's base URI, typically just the HTTP root. "
        "The service path (onvif/device_service) is appended to it.",
    )
    parser.add_argument("--username", help="Device username (requires --password)")
    parser.add_argument("--password", help="Device password (requires --username)")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for the device's service list",
    )
    parser.add_argument(
        "--wsdl-dir",
        type=Path,
        help="Directory with ONVIF WSDL files (default: the bundled files)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser(
        "get-system-date-and-time", help="Show the device clock"
    )
    commands.add_parser(
        "get-service-capabilities",
        help="Show the capabilities of every advertised service",
    )
    pan = commands.add_parser(
        "pan-move", help="Pan the first video source via the provisioning service"
    )
    pan.add_argument("--direction", choices=["left", "right"], default="left")
    pan.add_argument("--duration", type=float, help="Seconds to keep moving")
    firmware = commands.add_parser(
        "upgrade-system-firmware", help="Send an UpgradeSystemFirmware request"
    )
    firmware.add_argument("--content-type", help="Firmware attachment content type")
    commands.add_parser("get-services", help="List the services the device advertises")
    commands.add_parser("capabilities", help="Show discovered capability addresses")
    return parser


def format_data(data: Any) -> str:
    return json.dumps(serialize_object(data), indent=2, default=str)


def print_result(label: str, result: CapabilityResult) -> int:
    if result.ok:
        print(f"{label}: {format_data(result.data)}")
        return 0
    print(f"Failed to fetch {label}: {result.error}")
    return 1


async def get_system_date_and_time(dispatcher: CommandDispatcher, args) -> int:
    result = await dispatcher.invoke(
        CapabilitySlot.DEVICEMGMT, operations.get_system_date_and_time
    )
    return print_result("system date and time", result)


async def get_service_capabilities(dispatcher: CommandDispatcher, args) -> int:
    results = await dispatcher.fan_out(operations.get_service_capabilities)
    for slot in REPORT_ORDER:
        result = results[slot]
        if result.status == ResultStatus.ABSENT:
            print(f"{slot.value}: not advertised")
        else:
            print_result(slot.value, result)
    return 0


async def pan_move(dispatcher: CommandDispatcher, args) -> int:
    operation = operations.pan_move(args.direction.capitalize(), args.duration)
    result = await dispatcher.invoke(CapabilitySlot.PROVISIONING, operation)
    if not result.ok:
        print(result.error)
        return 1
    print(f"pan move: {format_data(result.data)}")
    return 0


async def upgrade_system_firmware(dispatcher: CommandDispatcher, args) -> int:
    operation = operations.upgrade_system_firmware(args.content_type)
    result = await dispatcher.invoke(CapabilitySlot.DEVICEMGMT, operation)
    return print_result("firmware upgrade", result)


async def get_services(dispatcher: CommandDispatcher, args) -> int:
    result = await dispatcher.invoke(CapabilitySlot.DEVICEMGMT, operations.get_services)
    if not result.ok:
        print(f"Failed to fetch services: {result.error}")
        return 1
    for service in result.data:
        version = f" (v{service.version})" if service.version else ""
        print(f"{service.namespace}{version}: {service.xaddr}")
    return 0


async def show_capabilities(dispatcher: CommandDispatcher, args) -> int:
    capabilities = dispatcher.capabilities
    for slot in CapabilitySlot:
        client = capabilities.get(slot)
        print(f"{slot.value}: {client.address if client else 'not advertised'}")
    return 0


HANDLERS = {
    "get-system-date-and-time": get_system_date_and_time,
    "get-service-capabilities": get_service_capabilities,
    "pan-move": pan_move,
    "upgrade-system-firmware": upgrade_system_firmware,
    "get-services": get_services,
    "capabilities": show_capabilities,
}


async def run(args: argparse.Namespace, target: DeviceTarget, settings: Settings) -> int:
    """Discover the device and run the selected command."""
    factory = ClientFactory(
        wsdl_dir=args.wsdl_dir or settings.wsdl_dir,
        timeout=settings.request_timeout,
    )
    timeout = args.timeout if args.timeout is not None else settings.discovery_timeout

    try:
        capabilities: CapabilitySet = await discover(
            target.uri, target.credentials(), factory=factory, timeout=timeout
        )
    except MissingBaseAddress:
        raise
    except DiscoveryError as e:
        logger.error(f"Discovery failed: {e}")
        return 1

    async with capabilities:
        return await HANDLERS[args.command](CommandDispatcher(capabilities), args)


def _pick(value: Optional[Any], default: Optional[Any]) -> Optional[Any]:
    return value if value is not None else default


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        target = DeviceTarget(
            uri=_pick(args.uri, settings.uri),
            username=_pick(args.username, settings.username),
            password=_pick(args.password, settings.password),
        )
    except ValidationError as e:
        parser.error("; ".join(err["msg"] for err in e.errors()))

    try:
        return asyncio.run(run(args, target, settings))
    except MissingBaseAddress as e:
        parser.error(str(e))


if __name__ == "__main__":
    sys.exit(main())
