#!/usr/bin/env python3
"""
Startup script for the brand overview service.
"""

import socket
import sys

import uvicorn

from brand_overview.config import settings


def check_port(port):
    """Check if a port is available"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    result = sock.connect_ex(('localhost', port))
    sock.close()
    return result != 0  # True if port is available


def main():
    print("=" * 60)
    print(f"{settings.APP_NAME} v{settings.VERSION}")
    print("=" * 60)

    if not check_port(settings.PORT):
        print(f"WARNING: Port {settings.PORT} is already in use!")
        return 1

    print("\nAccess Points:")
    print(f"   Health check:   http://localhost:{settings.PORT}/health")
    print(f"   API Docs:       http://localhost:{settings.PORT}/docs")
    print(f"   API Base:       http://localhost:{settings.PORT}/api")
    print("\nPress Ctrl+C to stop the server\n")

    uvicorn.run(
        "brand_overview.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info" if not settings.DEBUG else "debug",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
