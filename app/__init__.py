"""Backend package for the Wildwatch FastAPI service."""
from __future__ import annotations

import logging
import os
from typing import Any

import uvicorn

from .main import create_app


def main(**uvicorn_kwargs: Any) -> None:
    """Run the Wildwatch API using ``uvicorn``.

    Parameters
    ----------
    **uvicorn_kwargs: Any
        Optional keyword arguments forwarded to :func:`uvicorn.run`.
    """

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    host = os.environ.get("WILDWATCH_HOST", "0.0.0.0")
    port = int(os.environ.get("WILDWATCH_PORT", "4000"))

    config = {
        "app": "app.main:create_app",
        "factory": True,
        "host": host,
        "port": port,
        "reload": os.environ.get("WILDWATCH_RELOAD", "false").lower() == "true",
    }
    config.update(uvicorn_kwargs)
    uvicorn.run(**config)


__all__ = ["create_app", "main"]
