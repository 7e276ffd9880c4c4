# Gunicorn config for adsb-codec
bind = "127.0.0.1:8000"
workers = 1  # CPR cache lives in process memory; one worker keeps it coherent
timeout = 30
accesslog = "-"
errorlog = "-"
loglevel = "info"
