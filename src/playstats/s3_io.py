from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import StoreReadFailure, StoreWriteFailure

MISSING_CODES = {"404", "NoSuchKey"}


@dataclass
class S3Path:
    bucket: str
    key: str

    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


class S3IO:
    """Whole-document JSON reads and writes against a single bucket."""

    def __init__(self, bucket: str, region: str) -> None:
        self.bucket = bucket
        self.region = region
        self._client = boto3.client("s3", region_name=region)

    def path(self, key: str) -> S3Path:
        return S3Path(self.bucket, key)

    def get_json(self, key: str, default: Any = None) -> Any:
        """Return the parsed document at ``key``.

        A missing key yields ``default`` (an empty list when not given). Any
        other failure, including a body that is not valid JSON, raises
        ``StoreReadFailure``.
        """
        if default is None:
            default = []
        try:
            obj = self._client.get_object(Bucket=self.bucket, Key=key)
            body = obj["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in MISSING_CODES:
                return default
            raise StoreReadFailure(f"read {self.path(key).uri()} failed: {code}") from exc
        except BotoCoreError as exc:
            raise StoreReadFailure(f"read {self.path(key).uri()} failed: {exc}") from exc
        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as exc:
            raise StoreReadFailure(f"{self.path(key).uri()} is not valid JSON") from exc

    def put_json(self, key: str, value: Any) -> None:
        body = json.dumps(value, indent=2, default=str).encode("utf-8")
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreWriteFailure(f"write {self.path(key).uri()} failed: {exc}") from exc


def new_run_id() -> str:
    return uuid.uuid4().hex
