#!/usr/bin/env python3

import os
import subprocess
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

PORT = os.getenv("PORT", "8000")


def run_server():
    """Run the FastAPI development server with auto-reload"""
    print("Starting CSV Upload Portal (development)...")
    print(f"Server will be available at: http://localhost:{PORT}")
    print("Press Ctrl+C to stop")

    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "app.main:app",
        "--host",
        "0.0.0.0",
        "--port",
        PORT,
        "--reload",
    ]

    try:
        subprocess.run(cmd, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nShutting down server...")


if __name__ == "__main__":
    run_server()
