"""Flask JSON API over the site geometry engine."""

import logging
from typing import Optional

from flask import Flask, jsonify, request

from ..config_manager import ConfigManager
from ..exceptions import GeometryError, InsufficientVerificationInput, SelfIntersectingPolygon
from ..models.boundary import BoundaryAction, Direction
from ..models.calibration import Calibration, Rectangle
from ..models.geometry import Polygon
from ..services.boundary_actions import build_edge_record, check_action_conflicts
from ..services.boundary_geometry import BoundaryGeometry, edge_index_for_name
from ..services.error_handler import ErrorSeverity, global_error_handler
from ..services.homography_calibrator import (
    compute_calibration,
    order_points_once,
    validate_dimension,
)
from ..services.metric_verifier import MetricVerifier
from ..services.polygon_capture import PolygonCapture
from ..utils import is_normalized, parse_image_size, parse_points

logger = logging.getLogger(__name__)


class GeometryWebApp:
    """Flask application exposing the geometry engine to the console UI."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize web application."""
        self.app = Flask(__name__)
        self.config_manager = config_manager or ConfigManager()

        self.app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024  # 1MB of JSON

        self._setup_routes()
        self._setup_error_handlers()

        logger.info("Site geometry web application initialized")

    @property
    def config(self):
        return self.config_manager.get_config()

    def _setup_error_handlers(self):
        """Map engine errors to JSON responses."""

        @self.app.errorhandler(GeometryError)
        def handle_geometry_error(error):
            logger.warning(f"Rejected request to {request.path}: {error}")
            return jsonify({
                'success': False,
                'error': str(error),
                'error_type': type(error).__name__
            }), 400

        @self.app.errorhandler(ValueError)
        def handle_value_error(error):
            return jsonify({
                'success': False,
                'error': str(error),
                'error_type': 'ValueError'
            }), 400

        @self.app.errorhandler(500)
        def handle_internal_error(error):
            original = getattr(error, 'original_exception', None) or error
            global_error_handler.handle_error('web', original, ErrorSeverity.HIGH)
            logger.error(f"Error handling {request.path}: {original}")
            return jsonify({
                'success': False,
                'error': 'Internal server error'
            }), 500

        @self.app.errorhandler(KeyError)
        def handle_key_error(error):
            return jsonify({
                'success': False,
                'error': f"Missing field: {error.args[0] if error.args else error}",
                'error_type': 'KeyError'
            }), 400

    def _payload(self) -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")
        return data

    def _display_polygon(self, data: dict, image_size) -> Polygon:
        """Polygon in pixels; stored normalized coordinates are scaled to the image."""
        points = parse_points(data['polygon'])
        if image_size and is_normalized(points):
            points = [p.denormalized(*image_size) for p in points]
        return self._simple_polygon(points)

    @staticmethod
    def _simple_polygon(points) -> Polygon:
        polygon = Polygon.from_points(points)
        if not polygon.is_simple():
            raise SelfIntersectingPolygon()
        return polygon

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/api/status')
        def api_status():
            """Engine configuration and error summary."""
            return jsonify({
                'success': True,
                'data': {
                    'config': self.config.to_dict(),
                    'errors': global_error_handler.get_error_summary(),
                }
            })

        @self.app.route('/api/config', methods=['GET'])
        def api_get_config():
            return jsonify({'success': True, 'data': self.config.to_dict()})

        @self.app.route('/api/config', methods=['POST'])
        def api_update_config():
            """Update engine configuration."""
            updates = self._payload()
            if not self.config_manager.update_config(**updates):
                return jsonify({
                    'success': False,
                    'error': 'Invalid configuration values'
                }), 400
            return jsonify({'success': True, 'data': self.config.to_dict()})

        @self.app.route('/api/polygons/capture', methods=['POST'])
        def api_capture_polygon():
            """Replay clicked points through a polygon capture."""
            data = self._payload()
            points = parse_points(data['points'])
            image_size = parse_image_size(data.get('image'))

            capture = PolygonCapture(self.config)
            results = [capture.add_point(point).to_dict() for point in points]
            polygon = capture.polygon

            response = {
                'state': capture.state.value,
                'results': results,
                'polygon': polygon.to_dicts() if polygon else None,
                'edge_names': polygon.edge_names() if polygon else [],
                'normalized': None,
            }
            if polygon and image_size:
                response['normalized'] = polygon.normalized(*image_size)

            return jsonify({'success': True, 'data': response})

        @self.app.route('/api/boundaries/arrows', methods=['POST'])
        def api_boundary_arrows():
            """Arrow placement for one edge direction, or every edge."""
            data = self._payload()
            image_size = parse_image_size(data.get('image'))
            polygon = self._display_polygon(data, image_size)
            geometry = BoundaryGeometry(self.config)

            if 'boundary_name' in data:
                index = edge_index_for_name(data['boundary_name'], len(polygon))
                direction = Direction(data.get('direction', 'inward'))
                arrow = geometry.arrow_placement(polygon, index, direction, image_size)
                return jsonify({'success': True, 'data': arrow.to_dict()})

            arrows = {
                name: {direction: arrow.to_dict() for direction, arrow in by_direction.items()}
                for name, by_direction in geometry.edge_arrows(polygon, image_size).items()
            }
            markers = [m.to_dict() for m in geometry.vertex_markers(polygon, image_size)]
            return jsonify({'success': True, 'data': {'arrows': arrows, 'markers': markers}})

        @self.app.route('/api/boundaries/edge-record', methods=['POST'])
        def api_edge_record():
            """Validate a boundary action and build its edge payload."""
            data = self._payload()
            polygon = self._simple_polygon(parse_points(data['polygon']))
            action = BoundaryAction.create(
                edge_id=data['boundary_name'],
                direction=data['direction'],
                kind=data['action'],
                counter_ref=data.get('counter_id'),
                notify_condition=data.get('notify_condition'),
            )
            existing = [BoundaryAction.from_edge_record(r) for r in data.get('existing', [])]
            check_action_conflicts(action, existing)

            record = build_edge_record(str(data['roi_id']), polygon, action)
            return jsonify({'success': True, 'data': record.to_dict()})

        @self.app.route('/api/calibration', methods=['POST'])
        def api_calibrate():
            """Order four clicks and compute the calibration record."""
            data = self._payload()
            config = self.config
            points = parse_points(data['points'])
            width = validate_dimension(data.get('width'), 'width',
                                       config.max_dimension, config.max_dimension_decimals)
            height = validate_dimension(data.get('height'), 'height',
                                        config.max_dimension, config.max_dimension_decimals)

            corners = order_points_once(points)
            calibration = compute_calibration(Rectangle(corners, width, height))
            return jsonify({'success': True, 'data': calibration.to_record()})

        @self.app.route('/api/calibration/verify', methods=['POST'])
        def api_verify_calibration():
            """Check known lengths against a stored calibration record."""
            data = self._payload()
            calibration = Calibration.from_record(data['calibration'])
            verifier = MetricVerifier(calibration, self.config)

            line_errors = []
            for index, line in enumerate(data.get('lines', [])):
                start, end = parse_points([line['start'], line['end']])
                if verifier.is_full:
                    raise ValueError(
                        f"At most {self.config.max_verification_lines} verification lines are allowed"
                    )
                verifier.start_line(start)
                verifier.complete_line(end)
                try:
                    verifier.record_actual_length(line.get('actual_length'))
                except InsufficientVerificationInput as e:
                    # Only this line is discarded
                    line_errors.append({'index': index, 'error': str(e)})

            summary = verifier.summary().to_dict()
            summary['errors'] = line_errors
            return jsonify({'success': True, 'data': summary})

    def run(self, host='0.0.0.0', port=5000, debug=False):
        """Run the Flask application."""
        logger.info(f"Starting site geometry API on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug, threaded=True)

    def get_app(self):
        """Get the Flask app instance for external WSGI servers."""
        return self.app


def create_app(config_manager: Optional[ConfigManager] = None) -> Flask:
    """Factory function to create Flask app."""
    web_app = GeometryWebApp(config_manager)
    return web_app.get_app()


if __name__ == '__main__':
    from ..logging_config import setup_logging

    setup_logging()
    GeometryWebApp().run()
