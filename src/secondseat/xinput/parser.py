"""
Parser for `xinput list` output.

A listing looks like:

    ⎡ Virtual core pointer                    	id=2	[master pointer  (3)]
    ⎜   ↳ Virtual core XTEST pointer              	id=4	[slave  pointer  (2)]
    ⎣ Virtual core keyboard                   	id=3	[master keyboard (2)]
        ↳ Power Button                            	id=6	[slave  keyboard (3)]
    ∼ Detached Mouse                          	id=12	[floating slave]

Every line carrying an `id=` field is a device record.
"""

from typing import List, Optional
import logging
import re

from ..core.errors import QueryFailure
from ..core.gateway import RawDeviceRecord

logger = logging.getLogger(__name__)

# Tree drawing characters xinput puts in front of device names
TREE_GLYPHS = "⎡⎜⎣↳∼"

LIST_LINE_RE = re.compile(
    r"^(?P<name>.*?)\s*\bid=(?P<id>\S*)\s*(?:\[(?P<info>[^\]]*)\])?\s*$"
)

FLOATING_ROLE = "floating"


def _token(tokens: List[str], index: int) -> Optional[str]:
    return tokens[index] if index < len(tokens) else None


def parse_list_line(line: str) -> Optional[RawDeviceRecord]:
    """
    Parse one line of `xinput list` output.

    Args:
        line: A single line of output

    Returns:
        The record, or None for lines that describe no routed device
        (blank lines and floating secondaries)

    Raises:
        QueryFailure: If the line names a device but cannot be split up
    """
    text = line.strip().lstrip(TREE_GLYPHS + " \t")
    if "id=" not in text:
        return None

    match = LIST_LINE_RE.match(text)
    if not match:
        raise QueryFailure(f"unparseable xinput list line: {line!r}")

    # "[master pointer  (3)]" -> ["master", "pointer", "3"]
    info = match.group("info") or ""
    tokens = info.replace("(", " ").replace(")", " ").split()

    if _token(tokens, 0) == FLOATING_ROLE:
        logger.debug(f"Skipping floating device: {match.group('name')}")
        return None

    return RawDeviceRecord(
        name=match.group("name") or None,
        id=match.group("id") or None,
        role=_token(tokens, 0),
        device_type=_token(tokens, 1),
        primary_id=_token(tokens, 2),
    )


def parse_list_output(output: str) -> List[RawDeviceRecord]:
    """
    Parse the complete output of `xinput list`.

    Args:
        output: Text printed by xinput

    Returns:
        One record per routed device, in listing order

    Raises:
        QueryFailure: If any device line is malformed
    """
    records = []
    for line in output.splitlines():
        record = parse_list_line(line)
        if record is not None:
            records.append(record)
    return records
