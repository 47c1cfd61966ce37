# Routes package initialization
from .main_routes import main_bp
from .proxy_routes import proxy_bp
from .stream_routes import stream_bp

__all__ = ['main_bp', 'proxy_bp', 'stream_bp']
