"""WSGI entrypoint for serving the GlobalTax API with any WSGI server."""

from globaltax.backend.app import create_app

# WSGI servers (gunicorn, Passenger, mod_wsgi) look up ``application``.
application = create_app()
