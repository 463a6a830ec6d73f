"""CLI entry point for opaas-dbcs."""

import logging
import os
from typing import Optional


def build_app():
    """Build the Typer app."""
    import typer

    from opaas_dbcs import __version__
    from opaas_dbcs.cli.instance import instance_app

    app = typer.Typer(
        name="opaas-dbcs",
        help="Oracle Database Cloud Service instance provisioning CLI",
        add_completion=True,
    )

    def _version_callback(value: bool):
        if value:
            typer.echo(f"opaas-dbcs {__version__}")
            raise typer.Exit()

    @app.callback()
    def _root_callback(
        profile: Optional[str] = typer.Option(
            None,
            "--profile",
            "-p",
            help="Provider settings profile (from the config file's profiles).",
        ),
        verbose: bool = typer.Option(
            False, "--verbose", "-v", help="Enable debug logging."
        ),
        version: bool = typer.Option(
            False,
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ):
        """Set global CLI context options."""
        if profile:
            os.environ["OPAAS_PROFILE"] = profile
        if verbose:
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )

    app.add_typer(instance_app, name="instance")
    return app


def main():
    """Main CLI entry point."""
    build_app()()


if __name__ == "__main__":
    raise SystemExit(main())
