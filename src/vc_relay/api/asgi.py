"""ASGI entrypoint for the VC relay API."""

from vc_relay.api.app import create_app
from vc_relay.containers import build_container

app = create_app(build_container())
