"""
Application constants shared by the routers and services.
"""

PROJECT_NAME = "pdfshare"

API_PREFIX = "/api"

API_VERSION = "0.1.0"
SCHEMA_VERSION = "v1"

# File listing
FILES_PER_PAGE = 10

# Empty annotation document understood by the PDF viewer
DEFAULT_XFDF = (
    '<?xml version="1.0" encoding="UTF-8" ?>'
    '<xfdf xmlns="http://ns.adobe.com/xfdf/" xml:space="preserve"><annots></annots></xfdf>'
)

UNREGISTERED_USER_NAME = "[Unregistered User]"

# Auth cookie
ACCESS_TOKEN_COOKIE = "access_token"
COOKIE_MAX_AGE_SECONDS = 30 * 60

# Cache TTLs (seconds)
FILE_INFO_TTL = 600
FILE_USERS_TTL = 300
FILE_ANNOTATIONS_TTL = 600
USER_FILE_ROLE_TTL = 300
USER_FILE_LIST_TTL = 180

# Largest id an INTEGER primary key column holds
MAX_RECORD_ID = 2**31 - 1
MAX_PAGE = MAX_RECORD_ID // FILES_PER_PAGE
