"""Command-line entry point for sysdash."""

import sys
from pathlib import Path

import click
import structlog

from sysdash.config import MIN_REFRESH_MS, Config, ConfigError, parse_temperature_unit

log = structlog.get_logger()


@click.command()
@click.version_option(package_name="sysdash", prog_name="sysdash")
@click.option(
    "-r",
    "--rate",
    "refresh_ms",
    type=int,
    default=None,
    help=f"Refresh rate in milliseconds, min {MIN_REFRESH_MS}, defaults to 1000.",
)
@click.option(
    "-a", "--avgcpu", "show_average_cpu", is_flag=True,
    help="Show the average CPU usage.",
)
@click.option(
    "-c", "--celsius", "temperature_unit", flag_value="celsius",
    help="Report temperatures in Celsius (default).",
)
@click.option(
    "-f", "--fahrenheit", "temperature_unit", flag_value="fahrenheit",
    help="Report temperatures in Fahrenheit.",
)
@click.option(
    "-k", "--kelvin", "temperature_unit", flag_value="kelvin",
    help="Report temperatures in Kelvin.",
)
@click.option(
    "--config", "config_path", type=click.Path(path_type=Path), default=None,
    help="Config file (default: ~/.config/sysdash/config.toml).",
)
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Log file path.")
@click.option("--debug", is_flag=True, help="Log at debug level.")
def main(
    refresh_ms: int | None,
    show_average_cpu: bool,
    temperature_unit: str | None,
    config_path: Path | None,
    log_file: Path | None,
    debug: bool,
) -> None:
    """Live terminal dashboard of CPU, memory, network, disks, sensors and processes."""
    config = build_config(refresh_ms, show_average_cpu, temperature_unit, config_path, log_file)

    from sysdash.app import SysdashApp
    from sysdash.logging import configure

    configure(config.log_path, debug=debug)
    log.info("starting", refresh_ms=config.refresh_ms, unit=config.temperature_unit.value)

    app = SysdashApp(config)
    app.run()
    log.info("terminated", return_code=app.return_code)
    sys.exit(app.return_code or 0)


def build_config(
    refresh_ms: int | None,
    show_average_cpu: bool,
    temperature_unit: str | None,
    config_path: Path | None,
    log_file: Path | None,
) -> Config:
    """Merge file settings with flags and validate; bad values are usage errors."""
    try:
        config = Config.load(config_path)
        config = config.with_overrides(
            refresh_ms=refresh_ms,
            show_average_cpu=show_average_cpu or None,
            temperature_unit=(
                parse_temperature_unit(temperature_unit) if temperature_unit else None
            ),
            log_path=log_file,
        )
        return config.validate()
    except ConfigError as e:
        raise click.UsageError(str(e)) from e


if __name__ == "__main__":
    main()
