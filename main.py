"""
Main command-line interface for pylwrp.

This script provides a CLI to interact with Livewire devices over LWRP.
"""

import argparse
import asyncio
import logging

from pylwrp.address import (
    StreamFormat,
    address_to_stream_num,
    stream_format_from_address,
    stream_num_to_address,
)
from pylwrp.client import LwrpClient
from pylwrp.config import DEFAULT_HOST, DEFAULT_PORT, LwrpConfig
from pylwrp.listener import LoggingListener


async def connect(config: LwrpConfig) -> LwrpClient | None:
    print(f"Connecting to {config.host}:{config.port}...")
    client = LwrpClient(config)
    client.register_listener(LoggingListener())
    if not await client.async_connect():
        print("Connection failed")
        client.destroy()
        return None
    return client


async def show_status(config: LwrpConfig, wait: float):
    """Print which source every output is carrying."""
    client = await connect(config)
    if client is None:
        return

    # The device answers DST with every output, give it time to arrive
    await asyncio.sleep(wait)

    print("\nOutput Status:")
    print("-" * 80)
    outputs = client.outputs.outputs
    if not outputs:
        print("No outputs received")
    for output_num in sorted(outputs):
        attributes = outputs[output_num].attributes
        name = attributes.get("name", "")
        source = client.get_output_source(output_num) or "none"
        output_label = f"Output {output_num} ({name}):"
        print(f"{output_label:40s} {source}")
    print("-" * 80)

    client.destroy()


async def set_output(config: LwrpConfig, output_num: int, source: str, wait: float):
    """Route an output to a source."""
    client = await connect(config)
    if client is None:
        return

    print(f"Setting Output {output_num} to {source}...")
    if client.set_output(output_num, source):
        # Let the command worker write the command before closing
        try:
            await asyncio.wait_for(client.async_wait_sent(), timeout=wait)
            print("Done")
        except asyncio.TimeoutError:
            print("Timed out sending command")
    client.destroy()


async def send_command(config: LwrpConfig, command: str, wait: float):
    """Send a raw command and log what the device answers."""
    client = await connect(config)
    if client is None:
        return

    client.send_command(command)
    await asyncio.sleep(wait)
    client.destroy()


def show_address(value: str, stream_format: str):
    """Convert between stream numbers and multicast addresses."""
    try:
        if "." in value:
            print(f"{value}: stream {address_to_stream_num(value)} ({stream_format_from_address(value).value})")
        else:
            print(f"Stream {value}: {stream_num_to_address(int(value), StreamFormat(stream_format))}")
    except ValueError as e:
        print(f"Error: {e}")


def main():
    parser = argparse.ArgumentParser(description="Control Livewire devices over LWRP")
    parser.add_argument("--host", default=DEFAULT_HOST, help=f"Device hostname or IP (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"LWRP port (default: {DEFAULT_PORT})")
    parser.add_argument("--password", default="", help="Device password (default: none)")
    parser.add_argument("--wait", type=float, default=2.0, help="Seconds to wait for responses (default: 2)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Status command
    subparsers.add_parser("status", help="Show the source of every output")

    # Set output command
    set_parser = subparsers.add_parser("set", help="Route an output to a source")
    set_parser.add_argument("output", type=int, help="Output number (1-32767)")
    set_parser.add_argument("source", help="Stream number, multicast address or sip: descriptor")

    # Raw command
    send_parser = subparsers.add_parser("send", help="Send a raw LWRP command")
    send_parser.add_argument("text", nargs="+", help="Command text, e.g. VER")

    # Offline address conversion
    address_parser = subparsers.add_parser("address", help="Convert a stream number or multicast address")
    address_parser.add_argument("value", help="Stream number (0-65535) or multicast address")
    address_parser.add_argument(
        "--format",
        default=StreamFormat.STANDARD.value,
        choices=[stream_format.value for stream_format in StreamFormat],
        help="Stream format for stream numbers (default: standard)",
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    config = LwrpConfig(host=args.host, port=args.port, password=args.password)
    if args.command == "status":
        asyncio.run(show_status(config, args.wait))
    elif args.command == "set":
        asyncio.run(set_output(config, args.output, args.source, args.wait))
    elif args.command == "send":
        asyncio.run(send_command(config, " ".join(args.text), args.wait))
    elif args.command == "address":
        show_address(args.value, args.format)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
