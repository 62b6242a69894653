import os
import sys

# Add src directory to Python path so 'kol_hatorah' package can be found
sys.path.append(os.path.join(os.getcwd(), 'src'))

wsgi_app = "kol_hatorah.api.server:app"
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# SQLite connections are opened per request, so threads share nothing but the registry.
workers = int(os.environ.get('GUNICORN_WORKERS', '2'))
threads = int(os.environ.get('GUNICORN_THREADS', '4'))
worker_class = "gthread"

preload_app = False
accesslog = "-"
errorlog = "-"
loglevel = "info"
timeout = 60
