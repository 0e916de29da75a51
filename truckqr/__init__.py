from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_mail import Mail
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_caching import Cache
from dotenv import load_dotenv

# Setup logging first
from truckqr.utils.logging_config import setup_logging, get_logger

load_dotenv()

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()
mail = Mail()
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address)
cache = Cache()

logger = get_logger(__name__)


def create_app(config_name='default'):
    app = Flask(__name__)

    # Load configuration
    if config_name == 'development':
        from config.development import DevelopmentConfig
        app.config.from_object(DevelopmentConfig)
    elif config_name == 'production':
        from config.production import ProductionConfig
        app.config.from_object(ProductionConfig)
    elif config_name == 'testing':
        from config.testing import TestingConfig
        app.config.from_object(TestingConfig)
    else:
        from config.base import Config
        app.config.from_object(Config)

    setup_logging(app.config['LOG_LEVEL'], app.config['LOG_DIR'])

    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    cache.init_app(app)

    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access the admin panel.'

    @login_manager.user_loader
    def load_user(user_id):
        from truckqr.utils.security import AdminUser
        return AdminUser.get(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        from truckqr.utils.security import handle_unauthorized
        return handle_unauthorized()

    from truckqr.utils.error_handler import init_error_handlers
    init_error_handlers(app)

    # Register blueprints
    from truckqr.controllers.public import public_bp
    from truckqr.controllers.auth import auth_bp
    from truckqr.controllers.admin import admin_bp, api_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp, url_prefix='/admin')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(api_bp, url_prefix='/api')

    # Create tables
    from truckqr.utils.database import wait_for_database, ensure_schema
    with app.app_context():
        if wait_for_database(app.config['DB_CONNECT_RETRIES'], app.config['DB_CONNECT_RETRY_DELAY']):
            ensure_schema()

    logger.info(f"TruckQR created with {config_name} configuration "
                f"(alerts {app.config['ALERT_DAYS_BEFORE']} days ahead, {app.config['ALERT_TIMEZONE']})")
    return app
