"""
Host Status Agent - Entry point

Usage:
    python -m status_agent [--host HOST] [--port PORT]
"""

import argparse

import uvicorn

from status_agent.config import settings


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Host Status Agent")
    parser.add_argument("--host", default=settings.api_host, help="Address to bind")
    parser.add_argument("--port", type=int, default=settings.api_port, help="Port to listen on")
    args = parser.parse_args()

    uvicorn.run(
        "status_agent.main:app",
        host=args.host,
        port=args.port,
        reload=settings.api_debug,
    )


if __name__ == "__main__":
    main()
