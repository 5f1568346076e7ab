"""ASGI entrypoint for the Event Snap API."""

from event_snap.api.app import create_app
from event_snap.containers import build_container

app = create_app(build_container())
