"""Allow ``python -m serika_cli`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m serika_cli`` behaves identically to the ``serika``
console script.
"""

from __future__ import annotations

from serika_cli.cli.app import cli

if __name__ == "__main__":
    cli()
