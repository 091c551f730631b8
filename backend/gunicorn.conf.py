import os

# Serve the application factory
wsgi_app = "tokenauth:create_app()"

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
# Store and entropy calls block on a worker thread pool, not on gunicorn threads
threads = 1

# Worker timeout must stay above STORE_TIMEOUT_SECONDS + ENTROPY_TIMEOUT_SECONDS
timeout = 30
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr; application logs are JSON lines on stdout
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
