"""
Landing page blueprint.
"""

from flask import Blueprint, render_template, request

from matrixquiz.preferences import THEME_COOKIE, THEMES, resolve_theme
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPE_POINTS, QUESTION_TYPES

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def index():
    """Render the landing page with the stored theme applied."""
    return render_template(
        "index.html",
        theme=resolve_theme(request.cookies.get(THEME_COOKIE)),
        themes=THEMES,
        question_types=QUESTION_TYPES,
        levels=COGNITIVE_LEVELS,
        points=QUESTION_TYPE_POINTS,
    )
