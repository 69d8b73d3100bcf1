from datetime import timedelta

import os
import ZConfig


SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema.xml")

_schema = None


def _get_schema():
    global _schema
    if _schema is None:
        _schema = ZConfig.loadSchema(SCHEMA_PATH)
    return _schema


def parse_catalog(value):
    """Split a ``catalog`` line into (catalog_type, path_pattern)."""
    parts = value.split(None, 1)
    if len(parts) != 2:
        raise ValueError(
            f"catalog must be 'catalog-type path-pattern', got {value!r}"
        )
    return parts[0], parts[1].strip()


class S3ManagerFactory:
    """ZConfig factory for S3Manager."""

    def __init__(self, config):
        self.config = config
        self.name = config.getSectionName()

    def catalogs(self):
        return [parse_catalog(value) for value in self.config.catalogs or ()]

    def to_config(self):
        from catalog_s3.manager import Config

        config = self.config
        return Config(
            endpoint=config.endpoint,
            name=config.bucket_name,
            region=config.region,
            access_key=config.access_key,
            secret_key=config.secret_key,
            root_catalog=config.root_catalog or "",
            cdn=config.cdn or "",
            presigned_url_expire_time=timedelta(
                seconds=config.presigned_url_expire_time
            ),
            use_ssl=config.use_ssl,
            addressing_style=config.addressing_style,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )

    def open(self, client=None):
        from catalog_s3.manager import S3Manager

        manager = S3Manager(
            self.to_config(),
            is_test_server=self.config.test_mode,
            client=client,
        )
        for catalog_type, path_pattern in self.catalogs():
            manager.add_catalog(catalog_type, path_pattern)
        return manager


def load_config(source):
    """Load an ``<s3manager>`` section from a path or an open file."""
    schema = _get_schema()
    if hasattr(source, "read"):
        conf, _handler = ZConfig.loadConfigFile(schema, source)
    else:
        conf, _handler = ZConfig.loadConfig(schema, source)
    return conf.s3manager


def manager_from_config(source, client=None):
    return load_config(source).open(client=client)
