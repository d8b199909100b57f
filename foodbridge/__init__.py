import logging
import sqlite3

from flask import Flask
from flask_admin import Admin
from flask_admin.theme import Bootstrap4Theme
from flask_bcrypt import Bcrypt
from flask_restful import Api
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.exceptions import HTTPException

from config import Config
from foodbridge.errors import Internal

app = Flask(__name__)
app.config.from_object(Config)

logging.basicConfig(
    level=app.config['LOG_LEVEL'],
    format='%(asctime)s %(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)


@event.listens_for(Engine, 'connect')
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # sqlite ignores ON DELETE rules unless this is set per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


class FoodBridgeApi(Api):
    """Renders anything a resource lets escape as an ``Internal`` error."""

    def handle_error(self, e):
        if not isinstance(e, HTTPException):
            db.session.rollback()
            logger.exception('Unhandled error in %s', type(e).__name__)
            e = Internal()
        return super().handle_error(e)


db = SQLAlchemy(app)
bcrypt = Bcrypt(app)
api = FoodBridgeApi(app)
admin = Admin(app, name='FoodBridge',
              theme=Bootstrap4Theme(swatch=app.config['FLASK_ADMIN_SWATCH']))

from foodbridge import routes, manage  # noqa: E402,F401
