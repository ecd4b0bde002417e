"""Services behind the pdfshare API endpoints."""
