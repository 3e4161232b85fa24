from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS

# Flask extensions singletons

db = SQLAlchemy()
migrate = Migrate()
# Origins are bound per app from CORS_ALLOW_ORIGINS in create_app
cors = CORS()
