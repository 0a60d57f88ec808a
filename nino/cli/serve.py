"""Serve command: run the web API with uvicorn."""

import uvicorn

from nino.api.app import create_app
from nino.config import NinoSettings
from nino.exceptions import NinoException
from nino.state import ProjectStore
from nino.utils.logging import logger


def serve_command(args, settings: NinoSettings) -> int:
    try:
        store = ProjectStore(args.paths)
    except NinoException as e:
        print(f"❌ {e}")
        return 1

    app = create_app(store, settings)
    logger.info("Starting web server", url=f"http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0
