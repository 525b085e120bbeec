"""Quart async app proxying the checkout backend with flask-dropin.

Requires the quart extra::

    pip install "flask-dropin[quart]"

Run with::

    NEXT_PUBLIC_BACKEND_URL=http://localhost:8001 \\
    BACKEND_URL=http://localhost:8001 \\
    python examples/quart_app.py

The endpoints are the same as in the Flask version.
"""

from quart import Quart

from flask_dropin import FlaskDropin

app = Quart(__name__)
app.config["DROPIN_BACKEND_TIMEOUT"] = 10.0

# FlaskDropin detects Quart and registers the async blueprint automatically
ext = FlaskDropin(app)

if __name__ == "__main__":
    app.run(debug=True)
