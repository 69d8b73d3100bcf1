from catalog_s3.catalog import CatalogRegistry
from catalog_s3.catalog import InvalidInputError
from catalog_s3.catalog import resolve_catalog_path
from catalog_s3.catalog import StoragePath
from catalog_s3.interfaces import IS3Manager
from catalog_s3.s3client import S3Client
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from datetime import timedelta
from typing import BinaryIO
from typing import List
from typing import Optional
from zope.interface import implementer

import logging
import mimetypes


logger = logging.getLogger(__name__)

TEST_CATALOG = "test/"
DEFAULT_PRESIGNED_URL_EXPIRE_TIME = timedelta(minutes=15)


@dataclass(frozen=True)
class Config:
    """Connection and layout settings of one bucket.

    ``root_catalog`` is the service's directory inside the bucket (for
    example ``"static/myservice/"``). When ``cdn`` is set it replaces
    ``endpoint/bucket`` in the URLs of uploaded files.
    """

    endpoint: str
    name: str
    region: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    root_catalog: str = ""
    cdn: str = ""
    presigned_url_expire_time: timedelta = DEFAULT_PRESIGNED_URL_EXPIRE_TIME
    use_ssl: bool = True
    addressing_style: str = "auto"
    connect_timeout: int = 60
    read_timeout: int = 60


@dataclass
class BucketFile:
    """A readable, seekable stream and the file name (with extension) to store it as."""

    file: Optional[BinaryIO]
    name: str


@dataclass
class BucketFilesData:
    """Several files sharing one storage path."""

    path: StoragePath
    files: List[BucketFile] = field(default_factory=list)


def _as_seconds(expire_time):
    if isinstance(expire_time, timedelta):
        return int(expire_time.total_seconds())
    return int(expire_time)


@implementer(IS3Manager)
class S3Manager:
    """Catalog-aware file operations on one bucket.

    Object keys are ``root_catalog + pattern % id + file_name``; the root
    always comes from the configuration, never from the caller's
    ``StoragePath``.
    """

    def __init__(self, config, is_test_server=False, client=None, registry=None):
        if is_test_server:
            config = replace(config, root_catalog=config.root_catalog + TEST_CATALOG)
        self.config = config
        self.registry = registry if registry is not None else CatalogRegistry()
        if client is None:
            client = S3Client(
                bucket_name=config.name,
                endpoint_url=config.endpoint,
                region_name=config.region,
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
                use_ssl=config.use_ssl,
                addressing_style=config.addressing_style,
                connect_timeout=config.connect_timeout,
                read_timeout=config.read_timeout,
            )
        self._client = client

    def __repr__(self):
        return (
            f"<S3Manager bucket={self.config.name!r} "
            f"root_catalog={self.config.root_catalog!r}>"
        )

    # -- Catalogs --

    def add_catalog(self, catalog_type, path_pattern):
        self.registry.register(catalog_type, path_pattern)

    def get_catalog_pattern(self, storage_path, strict=False):
        return resolve_catalog_path(self.registry, storage_path, strict=strict)

    def object_key(self, storage_path, file_name, strict=False):
        storage_path = replace(storage_path, root_catalog=self.config.root_catalog)
        return self.get_catalog_pattern(storage_path, strict=strict) + file_name

    # -- URLs --

    def _raw_url(self, key):
        endpoint = self.config.endpoint.rstrip("/")
        return f"{endpoint}/{self.config.name}/{key.lstrip('/')}"

    def _public_url(self, key):
        if self.config.cdn:
            return f"{self.config.cdn.rstrip('/')}/{key.lstrip('/')}"
        return self._raw_url(key)

    def get_object_url(self, storage_path, file_name):
        if not file_name:
            raise InvalidInputError("get_object_url: file name is empty")
        return self._public_url(self.object_key(storage_path, file_name))

    # -- Listing --

    def get_files(self, prefix):
        # Raw endpoint URLs: listing does not apply the CDN host.
        return [self._raw_url(key) for key in self._client.list_objects(prefix)]

    # -- Uploads --

    def put_file(self, storage_path, bucket_file):
        if bucket_file is None or bucket_file.file is None or not bucket_file.name:
            raise InvalidInputError("put_file: invalid file data")

        key = self.object_key(storage_path, bucket_file.name)
        content_type, _ = mimetypes.guess_type(bucket_file.name)
        self._client.put_object(
            key,
            bucket_file.file,
            content_type=content_type or "application/octet-stream",
            acl="public-read",
        )
        logger.info("Uploaded %s to bucket %s", key, self.config.name)
        return self._public_url(key)

    def put_files(self, files_data):
        if files_data is None or not files_data.files:
            raise InvalidInputError("put_files: no files to upload")
        for bucket_file in files_data.files:
            if bucket_file is None or bucket_file.file is None or not bucket_file.name:
                raise InvalidInputError("put_files: invalid file data")
        return [
            self.put_file(files_data.path, bucket_file)
            for bucket_file in files_data.files
        ]

    def get_upload_presigned_url(self, storage_path, file_name, expire_time=None):
        if not file_name:
            raise InvalidInputError("get_upload_presigned_url: file name is empty")
        if not expire_time:
            expire_time = self.config.presigned_url_expire_time
        expires_in = _as_seconds(expire_time)
        if expires_in <= 0:
            raise InvalidInputError(
                f"get_upload_presigned_url: expiry must be positive, got {expire_time!r}"
            )
        key = self.object_key(storage_path, file_name)
        return self._client.generate_presigned_put_url(key, expires_in)

    # -- Deletion --

    def delete_exact(self, key):
        """Delete ``key`` itself; siblings sharing it as a prefix are kept."""
        if not key:
            raise InvalidInputError("delete_exact: key is empty")
        if key not in self._client.list_objects(key):
            logger.debug("Nothing to delete at %s", key)
            return
        self._client.delete_objects([key])
        logger.info("Deleted %s from bucket %s", key, self.config.name)

    def delete_prefix(self, prefix):
        """Delete every object whose key starts with ``prefix``."""
        if not prefix:
            raise InvalidInputError("delete_prefix: refusing to delete the bucket root")
        keys = list(self._client.list_objects(prefix))
        if not keys:
            logger.debug("Nothing to delete under %s", prefix)
            return
        self._client.delete_objects(keys)
        logger.info(
            "Deleted %d objects under %s from bucket %s",
            len(keys),
            prefix,
            self.config.name,
        )

    def delete_files(self, storage_path, file_name=""):
        """Delete ``file_name`` from the storage path's directory.

        Without a file name the whole directory goes.
        """
        if file_name:
            self.delete_exact(self.object_key(storage_path, file_name))
        else:
            self.delete_prefix(self.object_key(storage_path, ""))
