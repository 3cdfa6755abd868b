import logging
import sys

import typer

from kubeletdefaults.commands import apply, validate
from kubeletdefaults.config import get_config
from kubeletdefaults.logging import setup_logger

app = typer.Typer()

debug_mode = False


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the package loggers; logs go to stderr so stdout stays clean YAML."""
    config = get_config()
    log_level = logging.DEBUG if debug else getattr(logging, config.log_level, logging.INFO)
    return setup_logger("kubelet", level=log_level, fmt=config.log_format, stream=sys.stderr)


app.add_typer(apply.app, name="apply")
app.add_typer(validate.app, name="validate")


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """kubeletdefaults - fill in kubelet flags for a cluster specification."""
    global debug_mode
    debug_mode = debug
    logger = setup_logging(debug)
    if debug:
        logger.debug("Debug mode enabled")


if __name__ == "__main__":
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.getLogger("kubelet").error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.getLogger("kubelet").error(f"Error: {e}")
        sys.exit(1)
