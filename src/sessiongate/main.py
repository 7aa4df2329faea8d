"""Application entry point for the sessiongate server."""

from sessiongate.config import Config
from sessiongate.core.core import Core
from sessiongate.logging import setup_logging
from sessiongate.web.runner import run_server


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    core = Core(config)
    run_server(core)


if __name__ == "__main__":
    main()
