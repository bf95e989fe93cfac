# Gunicorn configuration for the cohort monitor (production)
#
#   gunicorn -c deploy/gunicorn.conf.py "src.web.app:create_app()"
#
# El roster vive en memoria del proceso: un solo worker.

bind = "127.0.0.1:5001"
workers = 1
worker_class = "sync"
timeout = 120
keepalive = 5

accesslog = "/var/log/cohorte-progreso/gunicorn-access.log"
errorlog = "/var/log/cohorte-progreso/gunicorn-error.log"
loglevel = "info"


def post_worker_init(worker):
    """Carga inicial del roster desde el registro remoto."""
    worker.wsgi.config["SINCRONIZADOR"].cargar()
