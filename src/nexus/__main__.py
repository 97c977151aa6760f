"""Nexus Bank entrypoint.

Run with:
  python -m nexus
"""

import logging
import os

import uvicorn

from nexus.infra.seed import load_seed

logger = logging.getLogger("nexus")


def main() -> None:
    host = os.getenv("NEXUS_HOST", "0.0.0.0")
    port = int(os.getenv("NEXUS_PORT", "3000"))
    reload = os.getenv("NEXUS_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    level = os.getenv("NEXUS_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    admin_email = load_seed().admin.get("email", "")
    logger.info("Server running on http://localhost:%s", port)
    logger.info("Environment: %s", os.getenv("NEXUS_ENV", "development"))
    if admin_email:
        logger.info("Demo admin: %s", admin_email)

    uvicorn.run("nexus.app:app", host=host, port=port, reload=reload, log_level=level.lower())


if __name__ == "__main__":
    main()
