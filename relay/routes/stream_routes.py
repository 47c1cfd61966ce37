"""
Stream API routes
Thin handlers: parse input, call the aggregator, serialize.

Route Structure:
- /api/stream?id=&server= (GET) - sub/dub streams for one episode on one server
- /api/stream/<content_type>/<tv_id>/ep/<epid> (GET) - episode streams on every server
- /api/stream/<content_type>/<tv_id> (GET) - movie/show streams on every server
"""
from flask import Blueprint, current_app, jsonify, request

from ..core.errors import ClientError

stream_bp = Blueprint('stream', __name__)


@stream_bp.route('/stream', methods=['GET'])
async def episode_stream():
    """GET /api/stream?id=<anime-id::ep=n>&server=hd-2"""
    episode_id = request.args.get('id', '').strip()
    if not episode_id:
        raise ClientError('Episode ID is required')

    server = request.args.get('server', '').strip() or current_app.config['DEFAULT_SERVER']
    response = await current_app.stream_aggregator.get_episode_streams(episode_id, server)
    return jsonify(response.to_dict())


@stream_bp.route('/stream/<content_type>/<tv_id>/ep/<epid>', methods=['GET'])
async def episode_multi_server(content_type, tv_id, epid):
    """GET /api/stream/<content_type>/<tv_id>/ep/<epid>"""
    servers = await current_app.stream_aggregator.get_multi_server_streams(content_type, tv_id, epid)
    return jsonify({
        'success': True,
        'contentType': content_type,
        'contentId': tv_id,
        'episode': epid,
        'servers': [s.to_dict() for s in servers],
    })


@stream_bp.route('/stream/<content_type>/<tv_id>', methods=['GET'])
async def movie_multi_server(content_type, tv_id):
    """GET /api/stream/<content_type>/<tv_id>"""
    servers = await current_app.stream_aggregator.get_multi_server_streams(content_type, tv_id)
    return jsonify({
        'success': True,
        'contentType': content_type,
        'contentId': tv_id,
        'servers': [s.to_dict() for s in servers],
    })
