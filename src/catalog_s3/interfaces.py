from zope.interface import Attribute
from zope.interface import Interface


class IS3Client(Interface):
    """Abstraction over S3-compatible object storage."""

    bucket_name = Attribute("Name of the bucket every operation targets.")

    def put_object(key, fileobj, content_type=None, acl="public-read"):
        """Upload the contents of a readable stream under ``key``."""

    def list_objects(prefix):
        """Yield every key starting with ``prefix``."""

    def delete_objects(keys):
        """Delete the given keys in bulk, without per-key replies."""

    def generate_presigned_put_url(key, expires_in):
        """Return a URL that allows a PUT to ``key`` for ``expires_in`` seconds."""


class ICatalogRegistry(Interface):
    """Mapping from catalog type to path pattern."""

    def register(catalog_type, path_pattern):
        """Insert or replace the pattern for ``catalog_type``."""

    def resolve(catalog_type):
        """Return the pattern, or None if the type was never registered."""

    def registered():
        """Return a snapshot of all registered patterns."""


class IS3Manager(Interface):
    """Catalog-aware file operations on one bucket."""

    def get_files(prefix):
        """Return raw endpoint URLs of every object under ``prefix``."""

    def put_file(storage_path, bucket_file):
        """Upload a file with public-read access and return its URL."""

    def put_files(files_data):
        """Upload several files under one storage path, returning their URLs."""

    def delete_files(storage_path, file_name=""):
        """Delete one file, or the whole catalog directory if no name is given."""

    def delete_exact(key):
        """Delete exactly ``key``; a missing key is a no-op."""

    def delete_prefix(prefix):
        """Delete every object under a non-empty ``prefix``."""

    def get_upload_presigned_url(storage_path, file_name, expire_time=None):
        """Return a presigned PUT URL for a file that will be uploaded later."""

    def get_object_url(storage_path, file_name):
        """Return the public URL of a file without contacting the bucket."""

    def get_catalog_pattern(storage_path, strict=False):
        """Return the key prefix of a storage path.

        An unregistered catalog type gives "", or UnknownCatalogError when
        ``strict`` is set.
        """

    def object_key(storage_path, file_name, strict=False):
        """Return the full object key, rooted at the configured root catalog."""

    def add_catalog(catalog_type, path_pattern):
        """Register a new catalog type."""
