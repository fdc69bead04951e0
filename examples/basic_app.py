"""Basic Flask app serving the checkout console.

Run with::

    export STRIPE_SECRET_KEY=sk_test_...
    export STRIPE_PUBLISHABLE_KEY=pk_test_...
    python examples/basic_app.py

Then open http://localhost:4242/ in your browser or use curl:

    # Connected accounts in US/CA/MX
    curl http://localhost:4242/api/accounts

    # Price previews for a Canadian parking lot
    curl "http://localhost:4242/api/tiers?country=CA"

    # Embedded checkout session
    curl -X POST http://localhost:4242/api/checkout/session \\
         -H "Content-Type: application/json" \\
         -d '{"customerId": "cus_123", "accountId": "acct_123", "spotOption": "vip"}'
"""

import os

from flask import Flask
from flask_connect_checkout import ConnectCheckout

app = Flask(__name__)
app.config["STRIPE_SECRET_KEY"] = os.environ.get("STRIPE_SECRET_KEY")
app.config["STRIPE_PUBLISHABLE_KEY"] = os.environ.get("STRIPE_PUBLISHABLE_KEY")

# Raises ConfigurationError when either key is missing
ext = ConnectCheckout(app)

if __name__ == "__main__":
    app.run(port=4242, debug=True)
