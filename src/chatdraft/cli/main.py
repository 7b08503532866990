"""chatdraft command-line interface."""

from __future__ import annotations

import click

from chatdraft.app_version import get_app_version
from chatdraft.observability import init_observability


@click.group()
@click.version_option(version=get_app_version(), prog_name="chatdraft")
def cli() -> None:
    """chatdraft - reply drafts for live support chats."""
    init_observability()


def _register_commands() -> None:
    from chatdraft.cli import analyze, config, serve

    analyze.register(cli)
    config.register(cli)
    serve.register(cli)


_register_commands()


if __name__ == "__main__":
    cli()
