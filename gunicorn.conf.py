"""Gunicorn configuration for the Clerk Admin API.

Usage:
    gunicorn -c gunicorn.conf.py admin_api.flask_app:app

Bind address, worker and thread counts come from the environment so the same
file serves local runs and containers. Secrets are read by
admin_api.config.settings in each worker (/run/secrets first, then env).
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:5000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
# Login verification waits on a thread pool; gthread keeps one slow Clerk
# call from blocking the whole worker.
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
# Must exceed the login search budget plus the verification timeout.
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"
    if demo_mode:
        worker.log.warning("DEMO_MODE=true - do not expose this worker publicly")

    secrets_dir = "/run/secrets"
    if os.path.isdir(secrets_dir) and os.listdir(secrets_dir):
        worker.log.info(f"Found {len(os.listdir(secrets_dir))} secrets in /run/secrets")
    elif not os.environ.get("CLERK_SECRET_KEY") and not demo_mode:
        worker.log.error("CLERK_SECRET_KEY missing from /run/secrets and environment")
