#!/usr/bin/env python3
"""
AI Video Survey API server: entrypoint for python -m survey_server.server.

For uvicorn survey_server:app use survey_server/__init__.py (exposes app from survey_server.app).
"""

from .app import app

if __name__ == "__main__":
    import uvicorn
    from .config import get_config
    config = get_config()
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
