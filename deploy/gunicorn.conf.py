import multiprocessing
import os

wsgi_app = "studio.main:app"
bind = "127.0.0.1:8000"
# The in-process scheduler and reminder job lock live per worker.
_scheduler_on = os.environ.get("ENABLE_SCHEDULER", "").strip().lower() in ("1", "true", "yes", "on")
workers = 1 if _scheduler_on else (multiprocessing.cpu_count() * 2) + 1
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
graceful_timeout = 30
keepalive = 5
loglevel = "info"
accesslog = "-"
errorlog = "-"
