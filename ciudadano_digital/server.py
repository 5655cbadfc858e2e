"""
Process entry point.

Starts the API as a long-running server:

    python -m ciudadano_digital

Configuration comes from the environment (see `.env.example`); there are no
command line arguments.
"""
import asyncio
import socket
from typing import List, Optional

import uvicorn

from ciudadano_digital.config.settings import Settings
from ciudadano_digital.core.application import create_application
from ciudadano_digital.core.process import install_loop_exception_handler, install_process_hooks
from ciudadano_digital.core.setup import setup_application
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)


class Server(uvicorn.Server):
    """uvicorn server that installs the loop observer and logs readiness."""

    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        install_loop_exception_handler(asyncio.get_running_loop())
        await super().startup(sockets=sockets)
        if self.started:
            logger.info("Server running", host=self.config.host, port=self.config.port)


def build_server(settings: Settings) -> Server:
    """Assemble the application and wrap it in a server bound to the configured port."""
    app = create_application(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
    return Server(config)


def main() -> None:
    settings = setup_application()
    install_process_hooks()
    build_server(settings).run()


if __name__ == "__main__":
    main()
