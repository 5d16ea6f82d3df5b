"""CLI entrypoint package.

Run as `python -m meditracker.cli.tracker_runner` or through the
`meditracker` console script.

Modules:
    tracker_runner: argparse subcommands and the interactive shell
"""

__all__ = ["tracker_runner"]
