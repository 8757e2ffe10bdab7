"""
API Blueprint for the Student Project Portal backend
"""
from flask import Blueprint, jsonify

# Create main API blueprint
api_bp = Blueprint('api', __name__)


@api_bp.route('/ping', methods=['GET'])
def ping():
    """Simple ping endpoint for testing"""
    return jsonify({'message': 'pong', 'status': 'ok'}), 200


# Import route modules
from project_portal.api import projects  # noqa: F401, E402
from project_portal.api import submissions  # noqa: F401, E402
