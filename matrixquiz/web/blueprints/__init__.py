"""Flask blueprints for the MatrixQuiz web service."""

from matrixquiz.web.blueprints.exports import exports_bp
from matrixquiz.web.blueprints.generation import generation_bp
from matrixquiz.web.blueprints.main import main_bp
from matrixquiz.web.blueprints.matrix import matrix_bp
from matrixquiz.web.blueprints.render import render_bp
from matrixquiz.web.blueprints.settings import settings_bp
from matrixquiz.web.blueprints.specification import specification_bp


def register_blueprints(app):
    """Register all blueprint modules on the Flask app."""
    app.register_blueprint(main_bp)
    app.register_blueprint(matrix_bp)
    app.register_blueprint(specification_bp)
    app.register_blueprint(render_bp)
    app.register_blueprint(generation_bp)
    app.register_blueprint(exports_bp)
    app.register_blueprint(settings_bp)
