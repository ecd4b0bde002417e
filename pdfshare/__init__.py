"""pdfshare.

Backend for a collaborative PDF workspace: users upload PDF documents, share
them with other people as editors or viewers, hand out shareable links, and
persist the annotations produced by the client-side PDF viewer.

High-level architecture
-----------------------

The codebase is split into two layers:

- ``pdfshare.core``: framework-independent building blocks.

  - Logging and optional logfire monitoring.
  - Domain errors.
  - The SQLModel entities and async repositories.
  - Password hashing and JWT handling.
  - Cache, object storage and e-mail adapters.

- ``pdfshare.server``: the FastAPI application.

  - Settings loaded from the environment.
  - Services that implement the access rules (owner/editor/viewer).
  - Routers for auth, files, sharing and annotations.

Roles
-----

Every file has exactly one owner. Other users reach a file either through an
explicit invitation (editor or viewer) or by redeeming a shareable link. The
owner is the only one who can share, change roles, manage links or delete the
file; editors can additionally save annotations; viewers can read.
"""

__version__ = "0.1.0"
