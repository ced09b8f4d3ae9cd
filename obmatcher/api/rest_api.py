"""
Status REST API for the matching agent.

This module exposes read-only HTTP endpoints for health checks, loop
statistics, the mirrored order book and the last selected match.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from ..agent.poll_loop import PollLoop
from ..config.settings import Settings
from ..core.matching_engine import sort_buys, sort_sells
from .validators import validate_book_side, validate_depth

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(agent: PollLoop, settings: Optional[Settings] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        agent: Poll loop whose state is reported
        settings: Settings shown on /config

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    CORS(app)

    register_routes(app, agent, settings)

    logger.info("Status API initialized")
    return app


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def register_routes(app: Flask, agent: PollLoop, settings: Optional[Settings]) -> None:
    """Register all API routes."""

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'running': agent.running,
            'cycles': agent.cycle_count,
            'timestamp': _timestamp(),
            'version': API_VERSION
        })

    @app.route('/statistics', methods=['GET'])
    def get_statistics():
        """Get loop, selector and performance statistics."""
        try:
            stats: Dict[str, Any] = agent.get_statistics()
            stats['performance'] = agent.monitor.get_summary()
            return jsonify(stats), 200

        except Exception as e:
            logger.error(f"Error getting statistics: {str(e)}")
            return jsonify({'error': 'Internal server error'}), 500

    @app.route('/orderbook', methods=['GET'])
    def get_order_book():
        """
        Get the mirrored order book in scan order.

        Query parameters:
        - side: buy, sell or both (default: both)
        - depth: Number of orders per side (default: 50, max: 500)
        """
        try:
            is_valid, error, side = validate_book_side(request.args.get('side'))
            if not is_valid:
                return jsonify({'error': error}), 400

            is_valid, error, depth = validate_depth(request.args.get('depth'))
            if not is_valid:
                return jsonify({'error': error}), 400

            # The loop swaps in a new mirror each cycle; hold one reference
            mirror = agent.mirror

            response_data: Dict[str, Any] = {
                'timestamp': _timestamp(),
                'snapshot_at': agent.last_snapshot_at.isoformat() if agent.last_snapshot_at else None,
                'statistics': mirror.get_statistics(),
            }
            if side in ('buy', 'both'):
                response_data['buys'] = [o.to_dict() for o in sort_buys(mirror.buys.values())[:depth]]
            if side in ('sell', 'both'):
                response_data['sells'] = [o.to_dict() for o in sort_sells(mirror.sells.values())[:depth]]

            return jsonify(response_data), 200

        except Exception as e:
            logger.error(f"Error getting order book: {str(e)}")
            return jsonify({'error': 'Internal server error'}), 500

    @app.route('/match/last', methods=['GET'])
    def get_last_match():
        """Get the most recently selected match."""
        selector = agent.selector
        if selector.last_match is None:
            return jsonify({'error': 'No match selected yet'}), 404

        return jsonify({
            'match': selector.last_match.to_dict(),
            'selected_at': selector.last_match_at.isoformat() if selector.last_match_at else None,
            'dry_run': agent.dry_run,
        }), 200

    @app.route('/config', methods=['GET'])
    def get_config():
        """Get non-secret configuration."""
        if settings is None:
            return jsonify({'error': 'Configuration not available'}), 404
        return jsonify(settings.to_dict()), 200

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors."""
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500
