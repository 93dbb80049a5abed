"""WSGI / `flask --app api.wsgi` entrypoint."""
from . import create_app

app = create_app()
