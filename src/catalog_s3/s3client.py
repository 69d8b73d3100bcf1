from botocore.config import Config
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError
from catalog_s3.interfaces import IS3Client
from zope.interface import implementer

import boto3
import logging


logger = logging.getLogger(__name__)

# Upper bound on keys accepted by a single DeleteObjects request.
DELETE_BATCH_SIZE = 1000


class S3OperationError(Exception):
    """Wraps botocore errors to avoid leaking AWS infrastructure details."""


@implementer(IS3Client)
class S3Client:
    """Thin boto3 wrapper for S3-compatible object storage.

    Keys are passed through untouched; building them is the caller's job.
    """

    def __init__(
        self,
        bucket_name,
        endpoint_url=None,
        region_name=None,
        aws_access_key_id=None,
        aws_secret_access_key=None,
        use_ssl=True,
        addressing_style="auto",
        connect_timeout=60,
        read_timeout=60,
    ):
        self.bucket_name = bucket_name

        config = Config(
            s3={"addressing_style": addressing_style},
            signature_version="s3v4",
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
        )

        kwargs = {"config": config}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if region_name:
            kwargs["region_name"] = region_name
        if aws_access_key_id:
            kwargs["aws_access_key_id"] = aws_access_key_id
        if aws_secret_access_key:
            kwargs["aws_secret_access_key"] = aws_secret_access_key
        kwargs["use_ssl"] = use_ssl
        if not use_ssl:
            logger.warning(
                "S3 SSL is disabled; data and credentials are sent in cleartext"
            )

        self._client = boto3.client("s3", **kwargs)

    def _wrap_error(self, e, operation, s3_key):
        """Wrap a botocore error in a generic one, logging the original at DEBUG."""
        logger.debug("S3 %s failed for key=%s: %s", operation, s3_key, e)
        if isinstance(e, ClientError):
            reason = e.response["Error"].get("Code", "Unknown")
        else:
            reason = type(e).__name__
        raise S3OperationError(
            f"S3 {operation} failed for key={s3_key}: {reason}"
        ) from e

    def put_object(self, key, fileobj, content_type=None, acl="public-read"):
        kwargs = {"Bucket": self.bucket_name, "Key": key, "Body": fileobj}
        if acl:
            kwargs["ACL"] = acl
        if content_type:
            kwargs["ContentType"] = content_type
        try:
            self._client.put_object(**kwargs)
        except (BotoCoreError, ClientError) as e:
            self._wrap_error(e, "put", key)

    def list_objects(self, prefix=""):
        paginator = self._client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                for obj in page.get("Contents", []):
                    yield obj["Key"]
        except (BotoCoreError, ClientError) as e:
            self._wrap_error(e, "list", prefix)

    def delete_objects(self, keys):
        keys = list(keys)
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start : start + DELETE_BATCH_SIZE]
            try:
                response = self._client.delete_objects(
                    Bucket=self.bucket_name,
                    Delete={
                        "Objects": [{"Key": key} for key in batch],
                        "Quiet": True,
                    },
                )
            except (BotoCoreError, ClientError) as e:
                self._wrap_error(e, "delete", batch[0])
            # Quiet mode still reports the keys that could not be deleted
            errors = response.get("Errors", [])
            if errors:
                first = errors[0]
                logger.debug("S3 delete reported %d errors: %s", len(errors), errors)
                raise S3OperationError(
                    f"S3 delete failed for key={first.get('Key')}: "
                    f"{first.get('Code', 'Unknown')}"
                )

    def generate_presigned_put_url(self, key, expires_in):
        try:
            return self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=int(expires_in),
            )
        except (BotoCoreError, ClientError) as e:
            self._wrap_error(e, "presign", key)
