"""Gunicorn configuration for MatrixQuiz."""

wsgi_app = "matrixquiz.web.app:create_app()"
bind = "0.0.0.0:8000"
workers = 1  # Figure snapshots and in-flight regenerations live in process memory
threads = 4
timeout = 120
accesslog = "-"
errorlog = "-"
loglevel = "info"
