"""ASGI entrypoint for the studio checkout API."""

from studio_checkout.api.app import create_app
from studio_checkout.containers import build_container

app = create_app(build_container())
