import os

class Config:
    # Signs session cookies. Set it in production.
    # Locally, a dev-only fallback is used so you don't need a .env file just to run the app.
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY and os.environ.get('FLASK_ENV') != 'development':
        import warnings
        warnings.warn('SECRET_KEY not set, using insecure default. Set SECRET_KEY env var in production!')
        SECRET_KEY = 'dev-secret-key-not-for-production'
    elif not SECRET_KEY:
        SECRET_KEY = 'dev-secret-key-not-for-production'

    # DATABASE_URL points at Postgres (or a mounted SQLite file) in production.
    # Locally, falls back to the instance/ folder next to this file.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'instance', 'campaign_forge.db')

    # This disables a noisy tracking feature we don't need
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie flags
    SESSION_COOKIE_HTTPONLY = True       # JavaScript can't read the session cookie
    SESSION_COOKIE_SAMESITE = 'Lax'     # Cookie only sent for same-site requests
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = 'Lax'

    # JSON clients send the token from GET /csrf-token in this header
    WTF_CSRF_HEADERS = ['X-CSRFToken', 'X-CSRF-Token']

    # Rate limiter storage (in-memory for a single process)
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    # Verbosity of app.logger (DEBUG, INFO, WARNING, ...)
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Result caps for the campaign search box
    SEARCH_NODE_LIMIT = 20
    SEARCH_SESSION_LIMIT = 10
