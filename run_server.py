#!/usr/bin/env python3
"""Run the Spritegen API server"""

import sys
from pathlib import Path

import uvicorn

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from fastapi_app.config import api_config


def main():
    """Run the FastAPI server"""
    host = api_config.get("server.host", "127.0.0.1")
    port = api_config.get("server.port", 8008)
    log_level = api_config.get("server.log_level", "info")
    reload = bool(api_config.get("server.reload", False))

    print("Starting Spritegen API")
    print(f"Server: {host}:{port}")
    print(f"Log level: {log_level}")
    print(f"API key env: {api_config.get('security.api_key_env')}")
    print("-" * 50)

    uvicorn.run(
        "fastapi_app:app",
        host=host,
        port=port,
        log_level=log_level,
        reload=reload
    )


if __name__ == "__main__":
    main()
