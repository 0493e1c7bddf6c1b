"""
Flask application factory.

Creates and configures the Flask app, wires the filter store and user
registry, registers all blueprints.
"""
from datetime import datetime, timezone
from flask import Flask


def _time_since(iso_str):
    """Jinja2 filter: ISO timestamp to '2m ago', or 'Oct 3, 4:05 PM' past a day."""
    if not iso_str:
        return ''
    try:
        if isinstance(iso_str, str):
            dt = datetime.fromisoformat(iso_str.replace('Z', '+00:00'))
        else:
            dt = iso_str
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        diff = (datetime.now(timezone.utc) - dt).total_seconds()
        if diff < 60:
            return 'just now'
        if diff < 3600:
            return f'{int(diff // 60)}m ago'
        if diff < 86400:
            return f'{int(diff // 3600)}h ago'
        local = dt.astimezone()
        hour = local.hour % 12 or 12
        return f"{local:%b} {local.day}, {hour}:{local:%M} {'AM' if local.hour < 12 else 'PM'}"
    except (TypeError, ValueError):
        return ''


def create_app(overrides=None):
    """
    Create and configure the Flask application.

    overrides: dict merged into app.config before the store and registry are
    built — tests use it to point DATA_DIR/USERS_CONFIG at tmp_path or to
    inject FILTER_STORE_INSTANCE.
    """
    from sievebox import config
    from sievebox.extensions import init_extensions
    from sievebox.logging_config import configure_logging

    app = Flask(__name__)

    app.config.update(config.as_dict())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    app.secret_key = app.config['SECRET_KEY']

    app.jinja_env.filters['time_since'] = _time_since

    init_extensions(app)

    # Register blueprints
    from sievebox.routes.api import bp as api_bp
    from sievebox.routes.ui import bp as ui_bp

    app.register_blueprint(api_bp)
    app.register_blueprint(ui_bp)

    return app
