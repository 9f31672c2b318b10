"""CLI entrypoint for serving the PETadex catalog API."""

from __future__ import annotations

import argparse

import uvicorn

from petadex.core.settings import get_settings
from petadex.interfaces.api import build_default_app


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Serve the PETadex catalog API")
    parser.add_argument("--host", default=settings.api.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.api.port, help="Bind port")
    args = parser.parse_args()

    uvicorn.run(build_default_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
