# gunicorn.conf.py -- gunicorn -c gunicorn.conf.py
import os

wsgi_app = "wilaya_api.main:app"
bind = f"0.0.0.0:{os.getenv('PORT', '3001')}"
workers = int(os.getenv("WEB_CONCURRENCY", "2"))
threads = int(os.getenv("WEB_THREADS", "2"))
worker_class = "uvicorn.workers.UvicornWorker"
# elke worker laadt de referentiedata zelf bij create_app()
preload_app = False
timeout = 30
graceful_timeout = 20
keepalive = 5
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
