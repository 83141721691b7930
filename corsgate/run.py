"""Programmatic uvicorn entry point for corsgate.

Serves the module-level app from corsgate.main, so the config file is read
and the CORS policy is parsed exactly once, at import. Host and port come from
that same config (127.0.0.1:8080 by default, CORSGATE_PORT overrides).

Usage:
    python -m corsgate.run
    corsgate                    # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from corsgate.utils.logger import get_logger

logger = get_logger(__name__)


def main() -> None:
    """Start the corsgate server.

    Raises:
        SystemExit: Propagated from config loading on an invalid config or policy.
    """
    from corsgate.main import app

    server = app.state.config.server
    logger.info("Starting corsgate", host=server.host, port=server.port)

    uvicorn.run(app, host=server.host, port=server.port)


if __name__ == "__main__":
    main()
