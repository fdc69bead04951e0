"""Quart async app serving the checkout console.

Requires the quart extra::

    pip install "flask-connect-checkout[quart]"

Run with::

    python examples/quart_app.py

The endpoints are the same as the Flask version.  Set ``CLIENT_HOST`` to
allow a separately hosted frontend through CORS.
"""

import os

from quart import Quart

from flask_connect_checkout import ConnectCheckout

app = Quart(__name__)
app.config["STRIPE_SECRET_KEY"] = os.environ.get("STRIPE_SECRET_KEY")
app.config["STRIPE_PUBLISHABLE_KEY"] = os.environ.get("STRIPE_PUBLISHABLE_KEY")
app.config["CONNECT_CHECKOUT_CLIENT_HOST"] = os.environ.get("CLIENT_HOST")

# ConnectCheckout detects Quart and registers the async blueprint automatically
ext = ConnectCheckout(app)

if __name__ == "__main__":
    app.run(port=4242, debug=True)
