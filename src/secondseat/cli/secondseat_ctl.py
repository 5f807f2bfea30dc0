#!/usr/bin/env python3
"""
secondseat: Command-line tool for sharing one X11 display between two users.

Built on xinput and X11 Multi-Pointer X (MPX), this tool allows:
- Adding a second seat: a new primary pointer/keyboard pair with one
  physical mouse and keyboard reattached to it
- Removing the second seat again
- Listing the current input device hierarchy
"""

import argparse
import json
import logging
import sys
import time
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Optional, TextIO

from ..config import Config, ConfigError, ConfigManager
from ..core import (
    DetectionError,
    Device,
    DeviceManager,
    DeviceType,
    Event,
    PrimaryPair,
    SecondSeatError,
)
from ..xinput import XinputGateway, check_xserver_version

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AddState(Enum):
    """Progress of the add workflow."""
    IDLE = auto()
    BASELINE_CAPTURED = auto()
    AWAITING_POINTER_DISCONNECT = auto()
    AWAITING_POINTER_RECONNECT = auto()
    POINTER_DETECTED = auto()
    AWAITING_KEYBOARD_DISCONNECT = auto()
    AWAITING_KEYBOARD_RECONNECT = auto()
    KEYBOARD_DETECTED = auto()
    PRIMARY_PAIR_CREATED = auto()
    POINTER_REATTACHED = auto()
    KEYBOARD_REATTACHED = auto()
    DONE = auto()


_DISCONNECT_STATE = {
    DeviceType.POINTER: AddState.AWAITING_POINTER_DISCONNECT,
    DeviceType.KEYBOARD: AddState.AWAITING_KEYBOARD_DISCONNECT,
}
_RECONNECT_STATE = {
    DeviceType.POINTER: AddState.AWAITING_POINTER_RECONNECT,
    DeviceType.KEYBOARD: AddState.AWAITING_KEYBOARD_RECONNECT,
}
_DETECTED_STATE = {
    DeviceType.POINTER: AddState.POINTER_DETECTED,
    DeviceType.KEYBOARD: AddState.KEYBOARD_DETECTED,
}


def create_device_manager(config: Config) -> DeviceManager:
    """
    Run the pre-flight check and connect to the X server through xinput.

    Raises:
        VersionCheckError: If the X server is too old
        QueryFailure: If the initial device listing fails
    """
    if config.skip_version_check:
        logger.debug("Skipping X server version check")
    else:
        check_xserver_version(config.min_xserver_version)

    gateway = XinputGateway(config.xinput_command, config.command_timeout)
    return DeviceManager(gateway)


class SecondSeatController:
    """
    High-level controller for the second seat workflows.

    Bridges between CLI commands and the core device manager, and talks
    to the operator through the given streams.
    """

    def __init__(self, manager: DeviceManager, config: Optional[Config] = None,
                 input_stream: Optional[TextIO] = None,
                 output_stream: Optional[TextIO] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the controller.

        Args:
            manager: Device manager connected to the X server
            config: Settings (defaults if None)
            input_stream: Where operator confirmations are read from
            output_stream: Where prompts and messages are written to
            sleep: Used for the settle delay
        """
        self.manager = manager
        self.config = config or Config()
        self.input = input_stream or sys.stdin
        self.output = output_stream or sys.stdout
        self._sleep = sleep
        self.state = AddState.IDLE

    def _print(self, message: str = "") -> None:
        print(message, file=self.output)

    def _advance(self, state: AddState) -> None:
        logger.debug(f"Add workflow: {self.state.name} -> {state.name}")
        self.state = state

    def _confirm(self, message: str) -> None:
        """Show a prompt and wait for the operator to press enter."""
        print(message, end="", file=self.output, flush=True)
        if not self.input.readline():
            raise SecondSeatError("Input closed while waiting for confirmation")

    def detect_device(self, device_type: DeviceType) -> Device:
        """
        Identify the physical device the operator plugs in.

        Args:
            device_type: Type of device to ask for

        Returns:
            The single new secondary device of that type

        Raises:
            DetectionError: If not exactly one new device appeared
        """
        kind = device_type.value

        self._advance(_DISCONNECT_STATE[device_type])
        self._confirm(f"\nMake sure the {kind} for the second seat is disconnected. [↵]")
        # Topology without the device, diffed against after reconnect
        self.manager.refresh_state()

        self._advance(_RECONNECT_STATE[device_type])
        self._confirm(f"Now connect the second {kind}. [↵]")
        if self.config.settle_delay > 0:
            self._sleep(self.config.settle_delay)

        new_devices = self.manager.detect_new_secondaries(device_type)
        if not new_devices:
            raise DetectionError(f"No new {kind} detected")
        if len(new_devices) > 1:
            names = ", ".join(d.name for d in new_devices)
            raise DetectionError(
                f"Expected one new {kind}, detected {len(new_devices)}: {names}")

        device = new_devices[0]
        self._print(f"Detected new {kind}: {device.name}")
        self._advance(_DETECTED_STATE[device_type])
        return device

    def add_seat(self) -> PrimaryPair:
        """
        Run the complete add workflow.

        Returns:
            The primary pair of the new seat

        Raises:
            SecondSeatError: If any step fails; the workflow is not retried
        """
        self.state = AddState.IDLE
        self.manager.refresh_state()
        self._advance(AddState.BASELINE_CAPTURED)

        pointer = self.detect_device(DeviceType.POINTER)
        keyboard = self.detect_device(DeviceType.KEYBOARD)

        pair = self.manager.create_primary_pair(self.config.primary_name)
        self._advance(AddState.PRIMARY_PAIR_CREATED)
        self._print("\nSuccessfully created a new primary device for second seat.")

        try:
            self.manager.reattach([pointer], pair.pointer.id)
            self._advance(AddState.POINTER_REATTACHED)
            self.manager.reattach([keyboard], pair.keyboard.id)
            self._advance(AddState.KEYBOARD_REATTACHED)
        except SecondSeatError:
            if self.config.cleanup_on_failure:
                self._remove_pair_after_failure(pair)
            raise

        self._advance(AddState.DONE)
        self._print("Successfully reattached devices to second seat.")
        return pair

    def _remove_pair_after_failure(self, pair: PrimaryPair) -> None:
        """Remove a freshly created pair after a later step failed."""
        logger.warning(f"Removing primary pair '{pair.name}' after failed reattachment")
        try:
            self.manager.remove_primary_pair(pair.pointer.id)
        except SecondSeatError as e:
            logger.error(f"Could not remove primary pair '{pair.name}': {e}")

    def remove_seat(self) -> PrimaryPair:
        """
        Remove the primary pair of the second seat.

        Returns:
            The pair that was removed

        Raises:
            PairingError: If no single valid pair carries the configured name
            GatewayError: If the X server refuses the removal
        """
        pair = self.manager.find_primary_pair_by_name(self.config.primary_name)
        self.manager.remove_primary_pair(pair.pointer.id)
        return pair

    def list_devices(self) -> dict:
        """Get the current device hierarchy."""
        self.manager.refresh_state()
        return self.manager.get_status()


def cmd_add(args, controller: SecondSeatController) -> int:
    """Handle 'add' command."""
    controller.add_seat()
    print("\nHave fun together! ( •ヮ•)八(•ヮ• )", file=controller.output)
    return 0


def cmd_remove(args, controller: SecondSeatController) -> int:
    """Handle 'remove' command."""
    controller.remove_seat()
    print("Second seat successfully removed.", file=controller.output)
    return 0


def cmd_list(args, controller: SecondSeatController) -> int:
    """Handle 'list' command."""
    status = controller.list_devices()
    out = controller.output

    if args.json:
        print(json.dumps(status, indent=2), file=out)
        return 0

    print("Primary devices:", file=out)
    for primary in status["primaries"]:
        print(f"  {primary['name']} (id={primary['id']}, {primary['type']}, "
              f"paired with {primary['paired_id']})", file=out)
        for secondary in primary["secondaries"]:
            print(f"    ↳ {secondary['name']} (id={secondary['id']})", file=out)
    print(f"\nTotal devices: {status['device_count']}", file=out)
    return 0


def cmd_config(args, config_manager: ConfigManager, output: TextIO) -> int:
    """Handle 'config' command."""
    if args.init:
        if config_manager.config_file.exists():
            raise ConfigError(f"{config_manager.config_file} already exists")
        config_manager.reset_to_defaults()
        print(f"Wrote default configuration to {config_manager.config_file}",
              file=output)
        return 0

    config = config_manager.load_config()
    values = {
        "primary_name": config.primary_name,
        "settle_delay": config.settle_delay,
        "command_timeout": config.command_timeout,
        "xinput_command": config.xinput_command,
        "min_xserver_version": config.min_xserver_version,
        "skip_version_check": config.skip_version_check,
        "cleanup_on_failure": config.cleanup_on_failure,
        "verbose": config.verbose,
        "log_file": config.log_file,
    }

    if args.json:
        print(json.dumps(values, indent=2), file=output)
    else:
        print("Configuration", file=output)
        print("=" * 40, file=output)
        print(f"File: {config_manager.config_file}", file=output)
        for key, value in values.items():
            print(f"  {key}: {value}", file=output)

    return 0


def setup_logging(debug: bool = False, log_file: str = "") -> None:
    """Configure the root logger for command line use."""
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            raise ConfigError(f"Could not open log file {log_file}: {e}") from e

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="secondseat",
        description="Add or remove input devices for a second seat.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  secondseat add                  Set up a mouse and keyboard for a second user
  secondseat remove               Remove the second seat again
  secondseat list                 Show primary devices and what is attached
  secondseat config --init        Write the default configuration file

Uses xinput and X11 Multi-Pointer X (MPX).
""",
    )

    parser.add_argument(
        "--config-dir",
        help="Override configuration directory",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # add
    subparsers.add_parser("add", help="Add input devices for a second user")

    # remove
    subparsers.add_parser("remove", help="Remove second input user")

    # list
    subparsers.add_parser("list", help="List primary devices and attached devices")

    # config
    p = subparsers.add_parser("config", help="Show configuration")
    p.add_argument("--init", action="store_true",
                   help="Write a default configuration file")

    return parser


def main(argv: Optional[list] = None,
         input_stream: Optional[TextIO] = None,
         output_stream: Optional[TextIO] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    output = output_stream or sys.stdout

    if not args.command:
        parser.print_help(file=output)
        return 0

    commands = {
        "add": cmd_add,
        "remove": cmd_remove,
        "list": cmd_list,
    }

    try:
        config_manager = ConfigManager(Path(args.config_dir) if args.config_dir else None)
        if args.command == "config":
            return cmd_config(args, config_manager, output)

        config = config_manager.load_config()
        setup_logging(args.debug or config.verbose, config.log_file)

        manager = create_device_manager(config)
        if args.debug:
            print("[DEBUG] Debug mode enabled", file=output)
            manager.add_event_listener(
                lambda event: _print_debug_event(event, output))

        controller = SecondSeatController(manager, config, input_stream, output)
        return commands[args.command](args, controller)
    except SecondSeatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _print_debug_event(event: Event, output: TextIO) -> None:
    details = ", ".join(f"{k}={v}" for k, v in event.data.items())
    device = f" device={event.device_id}" if event.device_id is not None else ""
    print(f"[DEBUG] {event.event_type.name}{device} {details}".rstrip(), file=output)


if __name__ == "__main__":
    sys.exit(main())
