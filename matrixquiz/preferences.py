"""
Display theme preference, persisted client-side in a cookie.
"""

THEME_COOKIE = "math-quiz-theme"
THEMES = ["light", "dark", "sepia"]
DEFAULT_THEME = "light"

# One year
THEME_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


def resolve_theme(value):
    """Return ``value`` if it names a known theme, otherwise the default."""
    if value and str(value).strip().lower() in THEMES:
        return str(value).strip().lower()
    return DEFAULT_THEME
