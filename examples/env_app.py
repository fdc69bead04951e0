"""App built from the environment / ``.env`` via :func:`create_app`.

Example ``.env``::

    STRIPE_SECRET_KEY=sk_test_...
    STRIPE_PUBLISHABLE_KEY=pk_test_...
    CLIENT_HOST=http://localhost:5174

Run with::

    flask --app examples/env_app.py run --port 4242
"""

from flask_connect_checkout import create_app

app = create_app()
