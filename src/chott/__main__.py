"""Run the Chott world server: ``python -m chott``."""

from __future__ import annotations

import os

import uvicorn

from chott.api.app import create_app


def main() -> None:
    host = os.environ.get("CHOTT_HOST", "127.0.0.1")
    port = int(os.environ.get("CHOTT_PORT", "8080"))
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
