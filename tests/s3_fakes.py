"""In-memory S3 client used by the storage tests."""

import io
from datetime import datetime, timezone
from hashlib import md5
from pathlib import Path

from botocore.exceptions import ClientError

TEST_BUCKET = "study-bucket"


def client_error(code: str, operation: str, status: int = 400) -> ClientError:
    """Build the ClientError botocore raises for an S3 error code."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakePaginator:
    def __init__(self, client: "FakeS3Client"):
        self._client = client

    def paginate(self, **kwargs):
        yield self._client.list_objects_v2(**kwargs)


class FakeS3Client:
    """In-memory stand-in for a boto3 S3 client.

    Keeps objects per bucket, records every call and can be told to fail
    an operation with a given exception.
    """

    def __init__(self, *buckets: str):
        self.buckets: dict[str, dict[str, tuple[bytes, datetime]]] = {
            name: {} for name in (buckets or (TEST_BUCKET,))
        }
        self.calls: list[str] = []
        self.writes = 0
        self.failures: dict[str, Exception] = {}

    def fail(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def _call(self, operation: str, bucket: str) -> dict[str, tuple[bytes, datetime]]:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]
        if bucket not in self.buckets:
            raise client_error("NoSuchBucket", operation, 404)
        return self.buckets[bucket]

    def head_bucket(self, Bucket):
        self._call("head_bucket", Bucket)
        return {}

    def head_object(self, Bucket, Key):
        objects = self._call("head_object", Bucket)
        if Key not in objects:
            raise client_error("404", "HeadObject", 404)
        data, modified = objects[Key]
        return {
            "ContentLength": len(data),
            "LastModified": modified,
            "ETag": f'"{md5(data).hexdigest()}"',
        }

    def put_object(self, Bucket, Key, Body=b""):
        objects = self._call("put_object", Bucket)
        objects[Key] = (bytes(Body), datetime.now(timezone.utc))
        self.writes += 1
        return {"ETag": f'"{md5(bytes(Body)).hexdigest()}"'}

    def upload_file(self, Filename, Bucket, Key):
        objects = self._call("upload_file", Bucket)
        objects[Key] = (Path(Filename).read_bytes(), datetime.now(timezone.utc))
        self.writes += 1

    def get_object(self, Bucket, Key):
        objects = self._call("get_object", Bucket)
        if Key not in objects:
            raise client_error("NoSuchKey", "GetObject", 404)
        return {"Body": io.BytesIO(objects[Key][0])}

    def list_objects_v2(self, Bucket, Prefix="", Delimiter=None, MaxKeys=1000):
        objects = self._call("list_objects_v2", Bucket)
        contents = []
        prefixes: list[str] = []
        for key in sorted(k for k in objects if k.startswith(Prefix)):
            rest = key[len(Prefix):]
            if Delimiter and Delimiter in rest:
                common = Prefix + rest[:rest.index(Delimiter) + 1]
                if common not in prefixes:
                    prefixes.append(common)
                continue
            data, modified = objects[key]
            contents.append({
                "Key": key,
                "Size": len(data),
                "LastModified": modified,
                "ETag": f'"{md5(data).hexdigest()}"',
            })
        contents = contents[:MaxKeys]
        response = {"KeyCount": len(contents) + len(prefixes), "Contents": contents}
        if prefixes:
            response["CommonPrefixes"] = [{"Prefix": p} for p in prefixes]
        return response

    def get_paginator(self, operation_name):
        assert operation_name == "list_objects_v2"
        return FakePaginator(self)


