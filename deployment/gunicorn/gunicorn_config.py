import os

# Stateless request handling: plain sync workers, no shared state between them
bind = os.getenv("GUNICORN_BIND", "unix:/run/contact-gateway/gunicorn.sock")
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
# Must exceed CAPTCHA_TIMEOUT plus EMAIL_TIMEOUT
timeout = 90
keepalive = 5

# Logging
accesslog = "/var/log/contact-gateway/access.log"
errorlog = "/var/log/contact-gateway/error.log"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "contact-gateway"

# Server mechanics
daemon = False
pidfile = "/run/contact-gateway/gunicorn.pid"
umask = 0o007

wsgi_app = "core.wsgi:application"
raw_env = ["DJANGO_SETTINGS_MODULE=core.settings"]


# Server hooks
def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Contact gateway ready. Spawning workers")


def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal (usually a timeout)."""
    worker.log.warning("Worker aborted, a CAPTCHA or SMTP call may have hung")
