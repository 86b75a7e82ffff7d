"""Serve the API with Uvicorn on the configured host and port."""

import uvicorn

from .main import app, config

if __name__ == "__main__":
    uvicorn.run(app, host=config.host, port=config.port)
