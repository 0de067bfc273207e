"""WSGI entrypoint.

Run with: `gunicorn -b 0.0.0.0:8000 genpac.wsgi:app`
"""

from genpac.app import app as app

# Common WSGI convention for other servers/tools.
application = app
