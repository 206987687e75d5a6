import datetime
from urllib.parse import urlparse

from google.cloud import storage as gcs_storage

from app.config import get_settings


def get_storage_client():
    return gcs_storage.Client(project=get_settings().GCP_PROJECT_ID or None)


def get_bucket():
    client = get_storage_client()
    return client.bucket(get_settings().GCS_BUCKET_NAME)


def split_gcs_uri(uri: str) -> tuple[str, str]:
    """Return ``(bucket, path)`` for a ``gs://bucket/path`` URI."""
    parsed = urlparse(uri)
    if parsed.scheme != "gs" or not parsed.netloc or not parsed.path.strip("/"):
        raise ValueError(f"Not a GCS object URI: {uri!r}")
    return parsed.netloc, parsed.path.lstrip("/")


def upload_file(path: str, file_bytes: bytes, content_type: str = "application/octet-stream") -> str:
    """Upload file to GCS bucket. Returns the GCS URI."""
    bucket = get_bucket()
    blob = bucket.blob(path)
    blob.upload_from_string(file_bytes, content_type=content_type)
    return f"gs://{bucket.name}/{path}"


def download_file(uri: str) -> bytes:
    """Download an object addressed by its ``gs://`` URI."""
    bucket_name, path = split_gcs_uri(uri)
    blob = get_storage_client().bucket(bucket_name).blob(path)
    return blob.download_as_bytes()


def generate_signed_url(uri: str, expiry_minutes: int = 60) -> str:
    """Generate a signed URL for temporary access to a GCS object."""
    bucket_name, path = split_gcs_uri(uri)
    blob = get_storage_client().bucket(bucket_name).blob(path)
    return blob.generate_signed_url(
        version="v4",
        expiration=datetime.timedelta(minutes=expiry_minutes),
        method="GET",
    )


def delete_file(uri: str) -> None:
    """Delete an object addressed by its ``gs://`` URI."""
    bucket_name, path = split_gcs_uri(uri)
    blob = get_storage_client().bucket(bucket_name).blob(path)
    blob.delete()
