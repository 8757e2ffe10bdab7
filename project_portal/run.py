#!/usr/bin/env python3
"""
Development server for the Student Project Portal backend

Usage:
    python -m project_portal.run
"""
import os

from project_portal.app import create_app


def main():
    """Run the development server"""
    os.environ.setdefault('FLASK_ENV', 'development')

    app = create_app(os.environ['FLASK_ENV'])

    host = os.environ.get('FLASK_HOST', '0.0.0.0')
    port = int(os.environ.get('FLASK_PORT', 3000))
    debug = os.environ.get('FLASK_DEBUG', 'true').lower() == 'true'

    print(f"""
    Student Project Portal running on http://{host}:{port}
    Default save location: {app.config['DEFAULT_SAVE_PATH']}
    Database: JSON ({app.config['DATA_DIR'] / app.config['PROJECTS_DB_FILE']})
    Debug mode: {'Enabled' if debug else 'Disabled'}
    """)

    app.run(
        host=host,
        port=port,
        debug=debug,
        use_reloader=debug
    )


if __name__ == '__main__':
    main()
