"""Run the relay with uvicorn: ``python -m qr_relay``."""

from __future__ import annotations

from . import _test_hooks
from .settings import load_settings_from_env


def main() -> None:
    settings = load_settings_from_env()
    # log_config=None keeps uvicorn from replacing our root handler
    _test_hooks.serve(
        "qr_relay.asgi:app", host=settings["host"], port=settings["port"], log_config=None
    )


if __name__ == "__main__":
    main()
