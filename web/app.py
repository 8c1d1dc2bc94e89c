"""Flask web app for the banjo configurator.

Serves the JSON API that product pages call to resolve option defaults,
apply choices and price a configuration from the sheet exports.
"""

import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

# Load environment variables from .env file (explicitly specify path)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from configurator import __version__  # noqa: E402
from configurator.config import BRAND_NAME, PAGE_VARIANTS  # noqa: E402
from configurator.logging_config import setup_logging  # noqa: E402
from web.api import api  # noqa: E402
from web.config import DATA_DIR, FLASK_DEBUG, FLASK_HOST, FLASK_PORT, LOG_TO_FILE  # noqa: E402

setup_logging(level=logging.DEBUG if FLASK_DEBUG else logging.INFO, log_to_file=LOG_TO_FILE)

app = Flask(__name__)
app.config["DATA_DIR"] = DATA_DIR
app.register_blueprint(api)


# ---------- FLASK ROUTES ----------


@app.route("/", methods=["GET"])
def index():
    """Service info and the variants it can price."""
    return jsonify({
        "service": f"{BRAND_NAME} configurator",
        "version": __version__,
        "variants": list(PAGE_VARIANTS),
    })


if __name__ == "__main__":
    # For local use set FLASK_DEBUG=true
    app.run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)
