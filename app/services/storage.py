"""Object storage client: presigned URLs, deletes and bucket CORS on S3."""

from urllib.parse import quote, unquote, urlparse, urlunparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings, get_settings

REQUIRED_SETTINGS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION", "S3_BUCKET_NAME")

_CLIENT_METHODS = {"PUT": "put_object", "GET": "get_object"}
_MISSING_CODES = ("404", "NoSuchKey", "NotFound")


class StorageConfigError(RuntimeError):
    """Raised when storage credentials or the bucket are not configured."""


class StorageError(RuntimeError):
    """Raised when a call to the object store fails."""


class ObjectStore:
    """Thin wrapper around an S3 client scoped to one bucket."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client = None

    @property
    def bucket(self) -> str:
        return self.settings.S3_BUCKET_NAME

    @property
    def region(self) -> str:
        return self.settings.AWS_REGION

    def ensure_configured(self) -> None:
        """Raise StorageConfigError naming the first missing setting."""
        for name in REQUIRED_SETTINGS:
            if not getattr(self.settings, name):
                raise StorageConfigError(f"{name} is not set")

    def _get_client(self):
        """Lazy-create the boto3 client."""
        if self._client is None:
            self.ensure_configured()
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                aws_access_key_id=self.settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=self.settings.AWS_SECRET_ACCESS_KEY,
            )
        return self._client

    def presign(self, method: str, key: str, expires_in: int, content_type: str | None = None) -> str:
        """Issue a time-limited URL allowing a single PUT or GET on ``key``."""
        client_method = _CLIENT_METHODS.get(method.upper())
        if client_method is None:
            raise ValueError(f"Unsupported presign method '{method}'")

        params = {"Bucket": self.bucket, "Key": key}
        # The browser must PUT with the same Content-Type header
        if content_type and client_method == "put_object":
            params["ContentType"] = content_type

        client = self._get_client()
        try:
            return client.generate_presigned_url(
                ClientMethod=client_method,
                Params=params,
                ExpiresIn=expires_in,
                HttpMethod=method.upper(),
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to presign {method.upper()} for {key}: {e}") from e

    def delete_object(self, key: str) -> None:
        """Delete a single object."""
        client = self._get_client()
        try:
            client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    def object_exists(self, key: str) -> bool:
        """Whether ``key`` is present in the bucket."""
        client = self._get_client()
        try:
            client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return False
            raise StorageError(f"Failed to look up {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to look up {key}: {e}") from e
        return True

    def put_cors(self, rules: list[dict]) -> None:
        """Replace the bucket CORS configuration."""
        client = self._get_client()
        try:
            client.put_bucket_cors(Bucket=self.bucket, CORSConfiguration={"CORSRules": rules})
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to configure CORS on {self.bucket}: {e}") from e

    def canonical_url(self, key: str) -> str:
        """Unsigned virtual-hosted-style URL of ``key``."""
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key)}"

    @staticmethod
    def strip_signing(url: str) -> str:
        """Drop the query string (signing parameters) and fragment from a URL."""
        parts = urlparse(url)
        return urlunparse((parts.scheme, parts.netloc, parts.path, "", "", ""))

    @staticmethod
    def key_from_url(url: str) -> str:
        """Object key addressed by a virtual-hosted-style URL."""
        return unquote(urlparse(url).path.lstrip("/"))


_object_store: ObjectStore | None = None


def get_object_store() -> ObjectStore:
    """Get singleton object store instance."""
    global _object_store
    if _object_store is None:
        _object_store = ObjectStore()
    return _object_store


def build_cors_rules(origins: list[str]) -> list[dict]:
    """CORS rules letting browsers PUT recordings straight into the bucket."""
    return [
        {
            "AllowedHeaders": ["*"],
            "AllowedMethods": ["PUT", "POST", "GET", "HEAD"],
            "AllowedOrigins": origins or ["*"],
            "ExposeHeaders": ["ETag"],
            "MaxAgeSeconds": 3600,
        }
    ]
