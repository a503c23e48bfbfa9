from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect

# Define extensions here without initializing with app
db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()
