"""
Dialmeter CLI - Main entry point.

Provides command-line interface for sending MQTT commands to a running
meter service.
"""

import argparse
import sys
from typing import Dict, Any

from .mqtt_client import MQTTCommandClient

COMMAND_TOPIC = "dialmeter/control/{service_id}/commands"


def build_command(name: str) -> Dict[str, Any]:
    """CLI subcommand name to wire payload ('snapshot' -> {'command': 'snapshot'})."""
    return {'command': name.replace('-', '_')}


def send_command(
    command: Dict[str, Any],
    service_id: str = "meter_01",
    broker: str = "localhost",
    port: int = 1883
) -> None:
    """
    Send command to the meter service via MQTT.

    Args:
        command: Command dictionary
        service_id: Target service ID
        broker: MQTT broker host
        port: MQTT broker port
    """
    topic = COMMAND_TOPIC.format(service_id=service_id)

    client = MQTTCommandClient(broker=broker, port=port)
    client.send_command(topic, command, qos=1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dialmeter-cli",
        description="Dialmeter CLI - Send MQTT commands to a meter service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report the current windows and total now
  dialmeter-cli snapshot

  # Another service on another broker
  dialmeter-cli --service-id cellar --broker 192.168.1.10 snapshot
"""
    )

    # Global arguments
    parser.add_argument(
        "--service-id",
        default="meter_01",
        help="Target service ID (default: meter_01)"
    )
    parser.add_argument(
        "--broker",
        default="localhost",
        help="MQTT broker host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=1883,
        help="MQTT broker port (default: 1883)"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    subparsers.add_parser('snapshot', help='Force a snapshot report')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        send_command(build_command(args.command), args.service_id, args.broker, args.port)
    except (ConnectionError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
