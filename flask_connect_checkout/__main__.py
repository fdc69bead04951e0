"""Run the checkout console with ``python -m flask_connect_checkout``.

Settings come from the environment (or a ``.env`` file): ``STRIPE_SECRET_KEY``,
``STRIPE_PUBLISHABLE_KEY``, ``CLIENT_HOST`` and ``PORT`` (default ``4242``).
"""

import logging
import os
import sys

from flask_connect_checkout import create_app
from flask_connect_checkout.exceptions import ConfigurationError

logger = logging.getLogger("flask_connect_checkout")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        app = create_app()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1
    port = int(os.environ.get("PORT", "4242"))
    logger.info("API server running on http://localhost:%s", port)
    app.run(port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
