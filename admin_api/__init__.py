"""Clerk Admin API Flask Application Package.

To use the Flask app:
    from admin_api.flask_app import app

To use the Clerk services:
    from admin_api.core.clerk import ClerkClient, UserService

To use the directory scanner and login gate:
    from admin_api.core.directory_scanner import DirectoryScanner
    from admin_api.core.authentication import CredentialGate
"""
# Note: We don't import flask_app by default to avoid Flask dependency
# for scripts that only use admin_api.core.clerk
