from routes.auth import auth_bp
from routes.users import users_bp
from routes.files import files_bp
from routes.ai import ai_bp


def register_blueprints(app):
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(files_bp)
    app.register_blueprint(ai_bp)
