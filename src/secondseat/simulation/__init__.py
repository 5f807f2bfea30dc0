"""
Simulation module for testing secondseat without an X server.

Provides an in-memory X input hierarchy that stands in for xinput.
"""

from .simulator import (
    SimulatedXServer,
    InjectedFailure,
    CREATE_PAIR,
    CREATE_POINTER_ONLY,
    CREATE_UNLINKED,
)

__all__ = [
    "SimulatedXServer",
    "InjectedFailure",
    "CREATE_PAIR",
    "CREATE_POINTER_ONLY",
    "CREATE_UNLINKED",
]
