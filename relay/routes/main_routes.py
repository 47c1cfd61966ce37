"""
Embed page and health routes
"""
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from flask import Blueprint, current_app, jsonify
from markupsafe import escape

main_bp = Blueprint('main', __name__)
logger = logging.getLogger(__name__)

_BODY_TAG = re.compile(r'<body([^>]*)>', re.IGNORECASE)


def inject_episode_id(html: str, episode_id: str) -> str:
    """Add data-episode-id to the <body> tag so the player script can pick it up"""
    attr = f' data-episode-id="{escape(episode_id)}"'
    return _BODY_TAG.sub(lambda m: f'<body{m.group(1)}{attr}>', html, count=1)


@main_bp.route('/embed', methods=['GET'])
@main_bp.route('/embed/<path:episode_id>', methods=['GET'])
def embed(episode_id: Optional[str] = None):
    """Serve the embeddable player page"""
    page = Path(current_app.config['EMBED_PAGE'])
    try:
        html = page.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.warning(f"Embed page missing: {page}")
        return jsonify({'error': 'Embed page not found'}), 404

    if episode_id:
        html = inject_episode_id(html, episode_id)
    return html, 200, {'Content-Type': 'text/html; charset=utf-8'}


@main_bp.route('/health', methods=['GET'])
def health():
    """Liveness check"""
    return jsonify({
        'alive': True,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
