#!/usr/bin/env python3
"""
Cemetery Records - development server entry point
"""

from cemetery_app import create_app
from cemetery_app.services.ollama_client import OllamaClient


def main_cli():
    """CLI entry point"""
    app = create_app()

    print("Cemetery Records")
    print("=" * 50)
    print(f"Record store: {app.config['RECORD_STORE']}")
    print(f"AI model: {app.config['OLLAMA_MODEL']} (vision: {app.config['OLLAMA_VISION_MODEL']})")
    if not OllamaClient.from_app_config(app.config).check_available():
        print(f"Warning: Ollama is not reachable at {app.config['OLLAMA_BASE_URL']}, AI features will fail")
    print()
    print("Access the interface at: http://localhost:5000")
    print()

    app.run(debug=True, host='0.0.0.0', port=5000)


if __name__ == '__main__':
    main_cli()
