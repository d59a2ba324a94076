"""
Gunicorn configuration for the push-up tracker.

Env vars that override defaults:
  PORT     — TCP port to bind (default: 8080)
  WORKERS  — number of worker processes (default: 1)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

# The record store is single-writer; more workers only add lock contention.
workers = int(os.environ.get("WORKERS", "1"))

worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5
timeout = 30

loglevel = "info"
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
