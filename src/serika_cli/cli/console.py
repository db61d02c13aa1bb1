"""CLI console helpers with optional Rich support.

This module avoids module-level imports of the UI dependencies so
bootstrap paths (``--help``, ``--version``, ``doctor``) keep working
even when Rich is not installed.
"""

from __future__ import annotations

import sys
from typing import Any

from serika_cli.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console instance (stderr unless told otherwise)."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stdout print."""
		try:
			rich_console = get_rich_console(stderr=False)
		except EnvironmentError:
			print(*objects)
			return
		rich_console.print(*objects)

	def error(self, *objects: object) -> None:
		"""Like :meth:`print`, but on stderr."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects)


console = _ConsoleProxy()
