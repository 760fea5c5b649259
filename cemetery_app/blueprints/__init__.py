"""
Flask blueprints for the web interface and JSON API
"""
