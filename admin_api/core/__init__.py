"""Core Business Logic Module

Pure Python (no Flask imports) so the same logic serves the HTTP API and
tests without HTTP mocking.

Module Structure:
    - clerk/               : Low-level Clerk Backend API client
    - directory_scanner.py : Bounded paging over the user listing
    - authentication.py    : Time-boxed login (CredentialGate)
    - user_admin.py        : Admin operations and provider error translation
    - validators.py        : Request payload validation
    - errors.py            : Error taxonomy (ValidationError, UpstreamFailure, ...)
    - audit.py             : Signed JSONL audit trail

Import explicitly when needed:
    from admin_api.core.directory_scanner import DirectoryScanner, email_equals
    from admin_api.core.authentication import CredentialGate, LoginResult
    from admin_api.core.user_admin import UserAdminService
"""
