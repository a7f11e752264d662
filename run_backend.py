#!/usr/bin/env python
"""Script to run the todo API server."""
import uvicorn

from todo_api.config import HOST, LOG_LEVEL, PORT, RELOAD
from todo_api.logging_setup import setup_logging

if __name__ == "__main__":
    setup_logging(LOG_LEVEL)
    uvicorn.run(
        "todo_api.main:app",
        host=HOST,
        port=PORT,
        reload=RELOAD,
        log_config=None,
    )
