"""
Run the server: python -m valeria
"""

import logging

import uvicorn

from .config import config


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"Valeria running at http://{config.host}:{config.port}")
    uvicorn.run("valeria.server:app", host=config.host, port=config.port, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
