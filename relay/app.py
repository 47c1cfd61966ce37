# relay/app.py
import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from relay.core.config import Config, config
from relay.core.errors import RelayError
from relay.providers import DubPolicy, ProviderAdapter, StreamAggregator
from relay.scrapers import HianimeScraper

from relay.routes.main_routes import main_bp
from relay.routes.proxy_routes import proxy_bp
from relay.routes.stream_routes import stream_bp

logger = logging.getLogger(__name__)


def create_app(
    config_name: Optional[str] = None,
    config_overrides: Optional[Dict[str, Any]] = None,
    scraper=None,
):
    """
    Application factory pattern.

    Args:
        config_name: key into the config map; defaults to FLASK_ENV, then
            "default"
        config_overrides: values applied on top of the selected config
        scraper: upstream sources scraper; defaults to HianimeScraper on
            HIANIME_API_URL
    """
    app = Flask(__name__, instance_relative_config=False)

    # Load configuration
    config_name = config_name or os.getenv("FLASK_ENV") or "default"
    if config_name not in config:
        raise ValueError(f"Unknown config '{config_name}', expected one of {sorted(config)}")
    app.config.from_object(config[config_name])
    if config_overrides:
        app.config.update(config_overrides)

    # Set up logging (use config value if available)
    log_level_name = app.config.get("LOG_LEVEL") or "INFO"
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    logging.basicConfig(level=log_level)

    # Shared read-only upstream handle; all per-request values are call arguments
    if scraper is None:
        scraper = HianimeScraper(
            app.config["HIANIME_API_URL"],
            timeout=app.config["HIANIME_TIMEOUT"],
        )
    adapter = ProviderAdapter(scraper, dub_policy=DubPolicy(app.config["DUB_POLICY"]))
    app.stream_aggregator = StreamAggregator(adapter, default_server=app.config["DEFAULT_SERVER"])
    app.logger.debug(f"Stream aggregator ready (dub policy: {adapter.dub_policy.value})")

    # Any origin may consume proxied media
    CORS(app, resources={r"/proxy": {"origins": "*"}})

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(proxy_bp)
    app.register_blueprint(stream_bp, url_prefix='/api')

    @app.after_request
    def disable_caching(response):
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
        return response

    # Error handlers
    @app.errorhandler(RelayError)
    def relay_error(e):
        """Handle ClientError / ProviderError / ProxyFetchError."""
        if e.status_code >= 500:
            app.logger.error(f"{e.status_code} error on {request.path}: {e.message}")
        else:
            app.logger.warning(f"{e.status_code} error on {request.path}: {e.message}")
        body = e.to_dict()
        if request.path.startswith('/api/'):
            body['success'] = False
        return jsonify(body), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        """Handle 404 / 405 and other werkzeug errors."""
        app.logger.warning(f"{e.code} error: {request.url}")
        return jsonify(error=e.description), e.code

    @app.errorhandler(Exception)
    def internal_server_error(e):
        """Handle anything unexpected."""
        app.logger.exception(f"500 error on {request.path}: {e}")
        return jsonify(error="Internal server error"), 500

    return app


def main():
    """Run the development server unless a managed host owns the socket."""
    if Config.MANAGED_HOSTING:
        logger.info("Managed hosting mode: not binding a port")
        return
    app.run(host='0.0.0.0', port=app.config["PORT"], debug=app.config["DEBUG"])


# For WSGI hosts (gunicorn relay.app:app, Vercel)
app = create_app()

if __name__ == '__main__':
    main()
