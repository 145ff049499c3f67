"""Entry point for the vmdeck command line."""

import click

from vmdeck import __version__
from vmdeck.cli.commands.vm import vm


@click.group()
@click.version_option(version=__version__, prog_name="vmdeck")
def main() -> None:
    """vmdeck - create and track a deployment's VM."""


main.add_command(vm)


if __name__ == "__main__":
    main()
