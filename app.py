"""Application entry point for the spa service tracker web UI."""

import logging

from servicetracker.webapp import create_app

app = create_app()
logging.basicConfig(
    level=app.config["LOG_LEVEL"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


if __name__ == "__main__":
    app.run(debug=True)
