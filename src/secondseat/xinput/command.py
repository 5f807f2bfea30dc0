"""
CommandGateway implementation that drives the `xinput` tool.
"""

from typing import List, Optional, Type
import logging
import subprocess

from ..core.errors import GatewayError, QueryFailure
from ..core.gateway import CommandGateway, RawDeviceRecord
from .parser import parse_list_output

logger = logging.getLogger(__name__)


class XinputGateway(CommandGateway):
    """
    Runs xinput subcommands as subprocesses.

    Each call blocks until xinput exits. With a timeout set, a call that
    takes longer fails with GatewayError instead of blocking forever.
    """

    def __init__(self, command: str = "xinput", timeout: Optional[float] = None):
        """
        Initialize the gateway.

        Args:
            command: Name or path of the xinput executable
            timeout: Seconds to wait for each call, None to wait indefinitely
        """
        self.command = command
        self.timeout = timeout

    def _run(self, args: List[str],
             error_class: Type[GatewayError] = GatewayError) -> str:
        """
        Run one xinput subcommand and return its stdout.

        Raises:
            error_class: If xinput cannot be run, times out or exits non-zero
        """
        argv = [self.command] + args
        logger.debug(f"Running: {' '.join(argv)}")

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise error_class(
                f"{args[0]} timed out after {self.timeout} seconds") from None
        except OSError as e:
            raise error_class(f"{args[0]} could not be run: {e}") from e

        if result.returncode != 0:
            raise error_class(
                f"{args[0]} failed with output '{result.stderr.strip()}'")

        return result.stdout

    def list_devices(self) -> List[RawDeviceRecord]:
        output = self._run(["list"], error_class=QueryFailure)
        return parse_list_output(output)

    def create_primary(self, name: str) -> None:
        self._run(["create-master", name])

    def remove_primary(self, device_id: int) -> None:
        self._run(["remove-master", str(device_id)])

    def reattach_device(self, device_id: int, target_primary_id: int) -> None:
        self._run(["reattach", str(device_id), str(target_primary_id)])
