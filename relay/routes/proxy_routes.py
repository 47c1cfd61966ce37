"""
Media proxy route
GET /proxy?url=<target> - fetch target, rewrite HLS playlists, pass through bytes
"""
import logging

from flask import Blueprint, Response, current_app, request

from ..core.errors import ClientError
from ..proxy.media import fetch_media

proxy_bp = Blueprint('proxy', __name__)
logger = logging.getLogger(__name__)


@proxy_bp.route('/proxy', methods=['GET'])
async def proxy():
    target_url = request.args.get('url', '').strip()
    if not target_url:
        raise ClientError('URL parameter required')

    media = await fetch_media(
        target_url,
        referer=current_app.config['PROXY_REFERER'],
        user_agent=current_app.config['PROXY_USER_AGENT'],
        timeout=current_app.config['PROXY_TIMEOUT'],
    )

    # opaque bodies without a declared type go out as raw bytes
    return Response(
        media.body,
        status=media.status,
        content_type=media.content_type or 'application/octet-stream',
    )
