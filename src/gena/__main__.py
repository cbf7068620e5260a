"""Run the GENA server: ``python -m gena``."""

from . import Gena
from .config import load_settings
from .logs import configure_logging


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    app = Gena(settings=settings)
    app.serve()


if __name__ == "__main__":
    main()
