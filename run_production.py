#!/usr/bin/env python3
"""
Production server runner for the CSV Upload Portal.

Uses Gunicorn with Uvicorn workers. Meant to be called by systemd or run
manually; for development use run.py (auto-reload).
"""
import os
import shutil
import sys
from pathlib import Path

project_root = Path(__file__).parent


def run_server():
    """Replace this process with Gunicorn"""
    gunicorn_bin = shutil.which("gunicorn")
    if gunicorn_bin is None:
        print("Gunicorn not found. Please install the project: pip install .")
        return 1

    print("Starting CSV Upload Portal (Production Mode)")
    print("=" * 50)
    print(f"Workers: {os.getenv('WEB_CONCURRENCY', '2')} (Uvicorn workers)")
    print(f"Bind: {os.getenv('BIND', '0.0.0.0:8000')}")
    print(f"Table policy: {os.getenv('TABLE_POLICY', 'allow_list')}")
    print("Config: gunicorn_conf.py")
    print("=" * 50)

    os.chdir(project_root)
    os.execv(gunicorn_bin, [
        gunicorn_bin,
        "-c", "gunicorn_conf.py",
        "app.main:app"
    ])


if __name__ == "__main__":
    sys.exit(run_server() or 0)
