"""Countdown timer routes."""

from flask import Blueprint, current_app, jsonify, request, send_file

from src.components.web import countdown_timer_handler
from src.utils.logging_utils import log_web_activity
from web.config import DEFAULT_DEADLINE

countdown_bp = Blueprint('countdown', __name__)

COUNTDOWN_PARAMS = ('width', 'height', 'color', 'bg', 'name', 'frames')


def _send_countdown(deadline_str: str, params: dict):
    try:
        gif_path = countdown_timer_handler.generate_countdown_timer(deadline_str, params)
        return send_file(gif_path, mimetype='image/gif', as_attachment=False, max_age=0)

    except ValueError as val_err:
        current_app.logger.error(f"Invalid countdown request: {val_err}", exc_info=True)
        return jsonify({'error': str(val_err)}), 400
    except Exception as exc:
        current_app.logger.error(f"Error generating countdown timer: {exc}", exc_info=True)
        error_buffer = countdown_timer_handler.generate_error_timer()
        return send_file(error_buffer, mimetype='image/gif', as_attachment=False, max_age=0)


@countdown_bp.route("/")
@log_web_activity
def index_countdown():
    """Countdown GIF with the default styling for the ?date= deadline."""
    deadline_str = request.args.get('date') or DEFAULT_DEADLINE
    return _send_countdown(deadline_str, {})


@countdown_bp.route('/api/countdown-timer')
@log_web_activity
def countdown_timer():
    """Generate an animated countdown timer GIF for emails."""
    deadline_str = request.args.get('date') or request.args.get('deadline')
    if not deadline_str:
        return jsonify({'error': 'date parameter required'}), 400

    params = {key: request.args.get(key) for key in COUNTDOWN_PARAMS if request.args.get(key)}
    return _send_countdown(deadline_str, params)
