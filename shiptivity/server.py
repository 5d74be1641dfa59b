import logging
import os

import uvicorn


def run() -> None:
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3001"))
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        uvicorn.run("shiptivity.main:app", host=host, port=port, log_level="info")
    except KeyboardInterrupt:
        pass
