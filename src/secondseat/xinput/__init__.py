"""
xinput module for secondseat.

Implements the command gateway on top of the xinput tool and the
X server version pre-flight check.
"""

from .command import XinputGateway
from .parser import parse_list_line, parse_list_output
from .preflight import (
    VersionCheckError,
    MIN_XSERVER_VERSION,
    check_xserver_version,
    find_xserver_version,
    parse_version,
)

__all__ = [
    "XinputGateway",
    "parse_list_line",
    "parse_list_output",
    "VersionCheckError",
    "MIN_XSERVER_VERSION",
    "check_xserver_version",
    "find_xserver_version",
    "parse_version",
]
