from kaleereads.routes.auth import bp as auth_bp
from kaleereads.routes.books import bp as books_bp
from kaleereads.routes.access_links import bp as access_links_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(books_bp)
    app.register_blueprint(access_links_bp)
