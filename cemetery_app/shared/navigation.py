"""
Navigation shell: the four top-level views and how the layout renders them
"""

from enum import Enum


class ActiveView(Enum):
    """Top-level views, each bound to the endpoint that renders it"""
    DASHBOARD = ('dashboard', 'Dashboard', 'main.index')
    RECORDS = ('records', 'Records', 'records.index')
    ADD = ('add', 'New Entry', 'records.new_record')
    ANALYSIS = ('analysis', 'Analysis', 'analysis.index')

    def __init__(self, key: str, label: str, endpoint: str):
        self.key = key
        self.label = label
        self.endpoint = endpoint


NAV_ITEMS = list(ActiveView)


def init_app(app):
    """Expose the navigation items to every template"""

    @app.context_processor
    def inject_navigation():
        return {'nav_items': NAV_ITEMS, 'ActiveView': ActiveView}
