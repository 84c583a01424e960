"""
Flask web application for previewing formatted query results.

Post a raw query response ({columns, rows}) and get back:
- /api/format        formatted rows as JSON
- /api/format/table  formatted rows as a plain-text table
"""

from flask import Flask, Response, request, jsonify
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dtable_sdk.config import FormatterConfig, load_config
from dtable_sdk.formatter import format_query_result, render_table
from dtable_sdk.utils.exceptions import DTableError, ResponseFormatError


def read_query_response():
    """Get the posted query response, or raise if the body isn't a JSON object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ResponseFormatError("request body must be a JSON object")
    return data


def create_app(config: FormatterConfig = None) -> Flask:
    """
    Create the preview app.

    Args:
        config: Formatter settings (resolved from the environment when None)
    """
    app = Flask(__name__)
    app.config['FORMATTER'] = config or load_config()
    # keep column order as formatted
    app.json.sort_keys = False

    @app.route('/api/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'})

    @app.route('/api/format', methods=['POST'])
    def format_rows():
        """Format a query response as JSON rows."""
        try:
            response = read_query_response()
            rows = format_query_result(response, app.config['FORMATTER'])
            return jsonify({'rows': rows, 'count': len(rows)})
        except DTableError as e:
            return jsonify({'error': str(e)}), 400

    @app.route('/api/format/table', methods=['POST'])
    def format_table():
        """Format a query response as a plain-text table."""
        try:
            response = read_query_response()
            rows = format_query_result(response, app.config['FORMATTER'])
            tablefmt = request.args.get('tablefmt', 'grid')
            return Response(render_table(rows, tablefmt=tablefmt), mimetype='text/plain')
        except DTableError as e:
            return jsonify({'error': str(e)}), 400

    return app


if __name__ == '__main__':
    app = create_app()
    print("\n" + "="*60)
    print("Query Result Preview Running!")
    print("POST a query response to http://localhost:5000/api/format")
    print("="*60 + "\n")
    app.run(debug=True, port=5000)
