"""Basic Flask app proxying the checkout backend with flask-dropin.

Run with::

    NEXT_PUBLIC_BACKEND_URL=http://localhost:8001 \\
    BACKEND_URL=http://localhost:8001 \\
    python examples/basic_app.py

Then use curl:

    # Client token for the payment widget
    curl http://localhost:5000/api/client-token

    # Submit a payment nonce
    curl -X POST http://localhost:5000/api/process-payment \\
         -H "Content-Type: application/json" \\
         -d '{"paymentMethodNonce": "fake-valid-nonce", "amount": "10.00",
              "userId": "USER_ID", "membershipId": "MEMBERSHIP_ID",
              "paymentMethod": "venmo"}'

    # Confirmation page
    curl http://localhost:5000/payment-success
"""

import logging

from flask import Flask
from flask_dropin import FlaskDropin

logging.basicConfig(level=logging.INFO)

app = Flask(__name__)

# Backend URLs are read from NEXT_PUBLIC_BACKEND_URL and BACKEND_URL
ext = FlaskDropin(app)

if __name__ == "__main__":
    app.run(debug=True)
