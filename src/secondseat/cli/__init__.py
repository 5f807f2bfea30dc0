"""
CLI module for secondseat.

Provides the secondseat command-line tool.
"""

from .secondseat_ctl import SecondSeatController, AddState, main

__all__ = ["SecondSeatController", "AddState", "main"]
