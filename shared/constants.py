"""
Shared constants used across the sync tool.
"""

# Configuration paths
DEFAULT_CONFIG_PATH = "config/asset_host.yml"
DEFAULT_S3_CONFIG_PATH = "config/s3.yml"
DEFAULT_ENVIRONMENT = "production"
DEFAULT_PUBLIC_PATH = "public"

# Environment variables
CONFIG_PATH_ENV = "CDN_SYNC_CONFIG"
ENVIRONMENT_ENV = "CDN_SYNC_ENV"
ACCESS_KEY_ENV = "AWS_ACCESS_KEY_ID"
SECRET_KEY_ENV = "AWS_SECRET_ACCESS_KEY"

# Asset layout
DEFAULT_ASSET_DIRS = ["images", "javascripts", "stylesheets", "assets"]
DEFAULT_PACKAGE_PATH = "assets"
DEFAULT_PLAIN_PREFIX = "plain"
DEFAULT_GZIP_PREFIX = "gz"
KEY_DIGEST_LENGTH = 9

# Asset classification
IMAGE_EXTENSIONS = ["png", "jpg", "jpeg", "gif", "ico", "svg", "webp", "bmp"]
CSS_EXTENSIONS = ["css"]
GZIP_EXTENSIONS = ["js", "css"]
COMPRESSED_EXTENSIONS = ["gz", "br"]

# Upload headers
ONE_YEAR_SECONDS = 365 * 24 * 60 * 60
CACHE_CONTROL = f"public,max-age={ONE_YEAR_SECONDS}"
PUBLIC_READ_ACL = "public-read"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
GZIP_CONTENT_ENCODING = "gzip"
GZIP_COMPRESS_LEVEL = 9
MIME_TYPES_FILENAME = "mime_types.yml"

# Upload settings
DEFAULT_PARALLEL_UPLOADS = 1
MAX_PARALLEL_UPLOADS = 8

# S3 Provider endpoints
CLOUDFLARE_R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"
