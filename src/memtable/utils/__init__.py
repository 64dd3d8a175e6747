"""Generic utilities and helpers.

This is a collection of generic utilities and helpers
that can be helpful in the other parts of the codebase
and are not specifically bound or related to any component.

Usually this will be generic Python utilities that could work
in any Python project.
"""

from . import inspect, naming, tabulate

__all__ = ("inspect", "naming", "tabulate")
