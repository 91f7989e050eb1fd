"""Application-wide constants.

This module centralizes the defaults used by the extractor so that the
settings layer, the CLI and the services share a single source of truth.
"""

# =============================================================================
# Extraction Configuration
# =============================================================================

# File extensions that qualify a remote URL as an image worth downloading
DEFAULT_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "avif", "svg", "gif")

# Public path under which downloaded images are served (and local subdirectory)
DEFAULT_PUBLIC_PATH = "/assets"

# Matches containing this marker are SVG namespace URIs, not downloadable images
SVG_NAMESPACE_MARKER = "http://www.w3.org/"

# =============================================================================
# Generated Site Layout
# =============================================================================

# Root directory of the generated static site
DEFAULT_OUTPUT_DIR = "dist"

# Router base path; "/" means no prefix is added to payload links
DEFAULT_ROUTER_BASE = "/"

# Directory (relative to the output dir) holding per-route payload files
DEFAULT_STATIC_ASSETS_DIR = "_nuxt/static"

# Serialized page-state file written per generated route
DEFAULT_PAYLOAD_FILENAME = "payload.js"

# =============================================================================
# Naming
# =============================================================================

# Marker placed between the path slug and the query-string slug
SEARCH_PARAMS_MARKER = "-searchparams"

# Length of the optional query hash suffix (hex digits of sha1)
QUERY_HASH_LENGTH = 8

# Slug used when a URL path slugifies to nothing
FALLBACK_ASSET_SLUG = "image"

# =============================================================================
# HTTP Configuration
# =============================================================================

# Default timeout for image downloads (seconds)
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0

# Size of chunks written to disk while streaming a response body (bytes)
DOWNLOAD_CHUNK_SIZE_BYTES = 64 * 1024
