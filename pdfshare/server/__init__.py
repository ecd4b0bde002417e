"""
pdfshare Server Package.

This package contains the web server implementation for pdfshare.
It includes the API definition, configuration, and the service layer.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration, constants and database dependencies.
    services: Business logic enforcing the sharing and role rules.
    middleware: Request logging middleware.
    exception_handlers: Mapping of domain errors to HTTP responses.
"""
