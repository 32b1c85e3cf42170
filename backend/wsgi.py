# Overview: WSGI entry point (FLASK_APP=wsgi.py) for the BarberPro API service.

from barberpro import create_app

app = create_app()
