#!/usr/bin/env python
"""Script to run the task manager backend server."""
import uvicorn

from taskmanager.config import Settings

if __name__ == "__main__":
    settings = Settings.from_env()
    uvicorn.run(
        "taskmanager.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
        reload=not settings.is_production,
    )
