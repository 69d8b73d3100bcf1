from catalog_s3.catalog import CatalogRegistry
from catalog_s3.catalog import CUSTOM_CATALOG
from catalog_s3.catalog import CustomPath
from catalog_s3.catalog import EntityID
from catalog_s3.catalog import InvalidInputError
from catalog_s3.catalog import resolve_catalog_path
from catalog_s3.catalog import StoragePath
from catalog_s3.catalog import UnknownCatalogError
from catalog_s3.manager import BucketFile
from catalog_s3.manager import BucketFilesData
from catalog_s3.manager import Config
from catalog_s3.manager import S3Manager
from catalog_s3.s3client import S3Client
from catalog_s3.s3client import S3OperationError


__all__ = [
    "BucketFile",
    "BucketFilesData",
    "CatalogRegistry",
    "Config",
    "CUSTOM_CATALOG",
    "CustomPath",
    "EntityID",
    "InvalidInputError",
    "S3Client",
    "S3Manager",
    "S3OperationError",
    "StoragePath",
    "UnknownCatalogError",
    "resolve_catalog_path",
]
