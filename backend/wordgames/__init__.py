from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from wordgames.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from wordgames.main import main
    flask_app.register_blueprint(main)

    from wordgames.api.games import make_game_blueprint
    from wordgames.services.games.content import TemplateSlug
    for slug in TemplateSlug:
        flask_app.register_blueprint(
            make_game_blueprint(slug),
            url_prefix=f'/api/game/game-type/{slug.value}',
        )

    from wordgames.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login user loader
    from wordgames.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    @click.command('seed-templates')
    def seed_templates_command():
        """Creates the game template rows every game type needs."""
        from wordgames.services.games.repository import ensure_templates
        with flask_app.app_context():
            created = ensure_templates()
            print(f'Seeded {created} game template(s).')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from wordgames.services.games.repository import ensure_templates
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            ensure_templates()

            # Seed users
            users = [('teacher1', 'USER'), ('teacher2', 'USER'), ('admin', 'SUPER_ADMIN')]
            for username, role in users:
                user = User(username=username, role=role)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(seed_templates_command)
    flask_app.cli.add_command(db_reset_command)

    return flask_app
