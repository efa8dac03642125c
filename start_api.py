#!/usr/bin/env python3
"""
Startup script for the TVDB Episode Provider API
"""

import uvicorn
import sys
import socket
import argparse
from pathlib import Path


def is_port_in_use(port: int) -> bool:
    """Check if a port is already in use"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex(('localhost', port)) == 0


def find_free_port(start_port: int = 8000, max_attempts: int = 10) -> int:
    """Find a free port starting from start_port"""
    for port in range(start_port, start_port + max_attempts):
        if not is_port_in_use(port):
            return port
    raise RuntimeError(f"Could not find a free port in range {start_port}-{start_port + max_attempts - 1}")


def main():
    parser = argparse.ArgumentParser(description="Start the TVDB Episode Provider API")
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--auto-port",
        action="store_true",
        help="Automatically find a free port if the specified port is in use"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes"
    )
    args = parser.parse_args()

    project_root = Path(__file__).parent
    backend_dir = project_root / "backend"
    sys.path.insert(0, str(project_root))
    sys.path.insert(0, str(backend_dir))

    port = args.port
    if is_port_in_use(port):
        if args.auto_port:
            port = find_free_port(port)
            print(f"Port {args.port} is in use, using port {port} instead")
        else:
            print(f"ERROR: Port {port} is already in use!")
            print(f"\nOptions:")
            print(f"  1. Use a different port:")
            print(f"     python start_api.py --port 8001")
            print(f"  2. Auto-find a free port:")
            print(f"     python start_api.py --auto-port")
            sys.exit(1)

    print("Starting TVDB Episode Provider API...")
    print(f"Backend API: http://localhost:{port}")
    print(f"API Docs: http://localhost:{port}/docs")
    print("\nPress Ctrl+C to stop the server")

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=port,
        reload=args.reload,
        app_dir=str(backend_dir)
    )


if __name__ == "__main__":
    main()
