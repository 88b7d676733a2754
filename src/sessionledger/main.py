"""Application entry point for the SessionLedger server."""

from sessionledger.app import App
from sessionledger.config import Config
from sessionledger.logging import setup_logging
from sessionledger.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
