"""
Pre-flight check of the installed X server version.

Reattaching devices to extra primaries needs xserver-xorg-core 1.20 or
newer. The check reads the package list from dpkg, so it only works on
Debian based systems; elsewhere it can be switched off in the config.
"""

from typing import Optional, Tuple
import logging
import re
import subprocess

from ..core.errors import SecondSeatError

logger = logging.getLogger(__name__)

MIN_XSERVER_VERSION = "1.20"

# "ii  xserver-xorg-core  2:1.20.13-1ubuntu1  amd64  Xorg X server - core server"
XSERVER_PACKAGE_RE = re.compile(r"xserver-xorg-core[^:]*:([\d.]*)")


class VersionCheckError(SecondSeatError):
    """Raised when the X server version is unknown or too old."""
    pass


def parse_version(version: str) -> Tuple[int, ...]:
    """
    Parse a dotted version string into a comparable tuple.

    Raises:
        VersionCheckError: If the string is not a dotted number
    """
    parts = version.strip(".").split(".")
    try:
        return tuple(int(p) for p in parts)
    except ValueError:
        raise VersionCheckError(f"invalid version {version!r}") from None


def find_xserver_version(package_list: str) -> Optional[str]:
    """
    Find the xserver-xorg-core version in `dpkg -l` output.

    Returns:
        The upstream version (epoch and Debian revision dropped), or None
    """
    match = XSERVER_PACKAGE_RE.search(package_list)
    if not match or not match.group(1).strip("."):
        return None
    return match.group(1)


def read_package_list(timeout: Optional[float] = None) -> str:
    """
    Return the output of `dpkg -l`.

    Raises:
        VersionCheckError: If dpkg cannot be run or fails
    """
    try:
        result = subprocess.run(
            ["dpkg", "-l"],
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise VersionCheckError(f"could not query installed packages: {e}") from e

    if result.returncode != 0:
        raise VersionCheckError(
            f"dpkg failed with output '{result.stderr.strip()}'")
    return result.stdout


def check_xserver_version(minimum: str = MIN_XSERVER_VERSION,
                          package_list: Optional[str] = None) -> str:
    """
    Ensure the installed X server is at least `minimum`.

    Args:
        minimum: Lowest supported version
        package_list: `dpkg -l` output; read from the system when None

    Returns:
        The installed version

    Raises:
        VersionCheckError: If the version is lower or cannot be determined
    """
    if package_list is None:
        package_list = read_package_list()

    found = find_xserver_version(package_list)
    if found is None:
        raise VersionCheckError("xserver-xorg-core is not installed")

    if parse_version(found) < parse_version(minimum):
        raise VersionCheckError(
            f"installed X version {found} is lower than required version {minimum}")

    logger.debug(f"X server version {found} satisfies minimum {minimum}")
    return found
