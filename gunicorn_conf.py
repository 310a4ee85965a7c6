"""
Gunicorn configuration for the CSV Upload Portal.

Values can be overridden through environment variables so the same file
serves a small VM and a container.
"""
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WEB_CONCURRENCY", "2"))

# UvicornWorker provides the ASGI support FastAPI needs
worker_class = "uvicorn.workers.UvicornWorker"

# Large CSVs are inserted batch by batch inside the request
timeout = int(os.getenv("GUNICORN_TIMEOUT", "120"))
graceful_timeout = 30
keepalive = 2

# Log to stdout/stderr (captured by journald or the container runtime)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

proc_name = "csv_upload_portal"

# systemd manages the process
daemon = False
pidfile = None

# Each worker creates its own engine after fork
preload_app = False
