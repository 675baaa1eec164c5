"""
Web layer for Taskboard.

The application is built by web.main.create_app; routers live in web.api.
"""
