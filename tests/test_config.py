from catalog_s3.catalog import StoragePath
from catalog_s3.config import load_config
from catalog_s3.config import manager_from_config
from catalog_s3.config import parse_catalog
from catalog_s3.config import S3ManagerFactory
from catalog_s3.manager import BucketFile
from catalog_s3.manager import S3Manager
from datetime import timedelta
from moto import mock_aws
from unittest import mock

import boto3
import io
import pytest
import ZConfig


MINIMAL = """\
<s3manager>
    endpoint https://s3.example.com
    bucket-name mybucket
</s3manager>
"""

FULL = """\
<s3manager>
    endpoint http://localhost:9000
    region us-east-1
    access-key minioadmin
    secret-key minioadmin
    bucket-name mybucket
    root-catalog static/myservice/
    cdn https://cdn.example.com
    presigned-url-expire-time 5m
    use-ssl false
    addressing-style path
    connect-timeout 5
    read-timeout 10
    test-mode true
    catalog user users/%d/
    catalog product_certificate products/%d/certificates/
</s3manager>
"""


@pytest.fixture
def s3_env():
    with mock_aws():
        boto3.client("s3", region_name="us-east-1").create_bucket(Bucket="mybucket")
        yield


class TestZConfig:
    def test_loads_factory(self):
        factory = load_config(io.StringIO(MINIMAL))
        assert isinstance(factory, S3ManagerFactory)

    def test_default_values(self):
        config = load_config(io.StringIO(MINIMAL)).to_config()
        assert config.endpoint == "https://s3.example.com"
        assert config.name == "mybucket"
        assert config.region is None
        assert config.root_catalog == ""
        assert config.cdn == ""
        assert config.presigned_url_expire_time == timedelta(minutes=15)
        assert config.use_ssl is True
        assert config.addressing_style == "auto"
        assert config.connect_timeout == 60
        assert config.read_timeout == 60

    def test_all_options(self):
        factory = load_config(io.StringIO(FULL))
        config = factory.to_config()
        assert config.region == "us-east-1"
        assert config.access_key == "minioadmin"
        assert config.secret_key == "minioadmin"
        assert config.root_catalog == "static/myservice/"
        assert config.cdn == "https://cdn.example.com"
        assert config.presigned_url_expire_time == timedelta(minutes=5)
        assert config.use_ssl is False
        assert config.addressing_style == "path"
        assert config.connect_timeout == 5
        assert config.read_timeout == 10
        assert factory.catalogs() == [
            ("user", "users/%d/"),
            ("product_certificate", "products/%d/certificates/"),
        ]

    def test_missing_bucket_name(self):
        with pytest.raises(ZConfig.ConfigurationError):
            load_config(io.StringIO("<s3manager>\n endpoint http://x\n</s3manager>\n"))

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "s3.conf"
        path.write_text(MINIMAL)
        assert load_config(str(path)).to_config().name == "mybucket"


class TestOpen:
    def test_open_registers_catalogs_and_test_mode(self):
        client = mock.Mock()
        manager = manager_from_config(io.StringIO(FULL), client=client)

        assert isinstance(manager, S3Manager)
        assert manager.config.root_catalog == "static/myservice/test/"
        key = manager.object_key(StoragePath.for_entity("product_certificate", 3), "c.pdf")
        assert key == "static/myservice/test/products/3/certificates/c.pdf"

    def test_open_builds_boto_client(self, s3_env):
        factory = load_config(
            io.StringIO(
                "<s3manager>\n"
                " endpoint https://s3.amazonaws.com\n"
                " region us-east-1\n"
                " bucket-name mybucket\n"
                " addressing-style path\n"
                " catalog user users/%d/\n"
                "</s3manager>\n"
            )
        )
        manager = factory.open()
        manager.put_file(
            StoragePath.for_entity("user", 1),
            BucketFile(file=io.BytesIO(b"x"), name="a.txt"),
        )
        assert manager.get_files("users/") == [
            "https://s3.amazonaws.com/mybucket/users/1/a.txt"
        ]


class TestParseCatalog:
    def test_parse(self):
        assert parse_catalog("user   users/%d/") == ("user", "users/%d/")

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_catalog("user")
