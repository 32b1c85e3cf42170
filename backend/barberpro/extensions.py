# Overview: Flask extension instances for the service database and migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Tenant tables declared on db.Model are also created in the embedded store's
# private engine, so models must not rely on the Flask-SQLAlchemy query property.
db = SQLAlchemy()
migrate = Migrate(compare_type=True)
