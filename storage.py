import logging
from pathlib import Path
from io import BytesIO
from typing import Optional

import boto3
import pandas as pd

from config import AWS_REGION, EXPORT_FOLDER, S3_BUCKET

logger = logging.getLogger(__name__)

def get_s3_client():
    return boto3.client("s3", region_name=AWS_REGION)

def _to_bytes(data: bytes | str | pd.DataFrame) -> bytes:
    if isinstance(data, pd.DataFrame):
        csv_buffer = BytesIO()
        data.to_csv(csv_buffer, index=False)
        return csv_buffer.getvalue()
    if isinstance(data, str):
        return data.encode("utf-8")
    return data

def save_file(
    file_name: str,
    data: bytes | str | pd.DataFrame,
    folder: str = EXPORT_FOLDER,
    bucket: Optional[str] = S3_BUCKET,
    base_dir: Path = Path("."),
) -> bool:
    """
    Saves an export to either local disk or S3.
    """
    body = _to_bytes(data)
    if bucket:
        s3 = get_s3_client()
        key = f"{folder}/{file_name}"
        try:
            s3.put_object(Bucket=bucket, Key=key, Body=body)
            logger.info("Uploaded %s to s3://%s/%s", file_name, bucket, key)
            return True
        except Exception as e:
            logger.error("S3 Upload Error: %s", e)
            return False
    else:
        # Local fallback
        local_path = base_dir / folder / file_name
        local_path.parent.mkdir(parents=True, exist_ok=True)
        with open(local_path, "wb") as f:
            f.write(body)
        logger.info("Saved %s", local_path)
        return True

def load_file(
    file_name: str,
    folder: str = EXPORT_FOLDER,
    bucket: Optional[str] = S3_BUCKET,
    base_dir: Path = Path("."),
) -> bytes | None:
    """
    Loads a previously saved export from either local disk or S3.
    """
    if bucket:
        s3 = get_s3_client()
        key = f"{folder}/{file_name}"
        try:
            obj = s3.get_object(Bucket=bucket, Key=key)
            return obj["Body"].read()
        except s3.exceptions.NoSuchKey:
            return None
        except Exception as e:
            logger.error("S3 Download Error: %s", e)
            return None
    else:
        # Local fallback
        local_path = base_dir / folder / file_name
        if local_path.exists():
            return local_path.read_bytes()
        return None

def list_files(
    folder: str = EXPORT_FOLDER,
    bucket: Optional[str] = S3_BUCKET,
    base_dir: Path = Path("."),
) -> list[str]:
    """
    Lists saved exports in a folder (Local or S3).
    """
    if bucket:
        s3 = get_s3_client()
        try:
            response = s3.list_objects_v2(Bucket=bucket, Prefix=f"{folder}/")
            if "Contents" in response:
                return [obj["Key"].split("/")[-1] for obj in response["Contents"]]
            return []
        except Exception as e:
            logger.error("S3 List Error: %s", e)
            return []
    else:
        local_path = base_dir / folder
        if local_path.exists():
            return sorted(f.name for f in local_path.glob("*") if f.is_file())
        return []
