"""ASGI entrypoint for the logbook API."""

from bridge_log.api.app import create_app
from bridge_log.containers import build_container

app = create_app(build_container())
