"""ASGI entrypoint for the sleep tracker API."""

from sleep_tracker.api.app import create_app
from sleep_tracker.containers import build_container

app = create_app(build_container())
