"""Snapshot service — archives one day of activity logs to MinIO."""

import io
import json
import logging
from datetime import date, datetime, timezone
from typing import Optional, Dict, Any

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError
from sqlalchemy.orm import Session

from contractorpro.core.config import settings
from contractorpro.core.exceptions import SnapshotError
from contractorpro.schemas.schemas import ActivityLogOut
from contractorpro.services.activity_service import activity_service

logger = logging.getLogger(__name__)


class SnapshotService:
    """Writes daily JSON snapshots of the activity log to object storage."""

    def __init__(self):
        self._client: Optional[Minio] = None

    @property
    def client(self) -> Minio:
        if self._client is None:
            self._client = Minio(
                settings.MINIO_ENDPOINT,
                access_key=settings.MINIO_ACCESS_KEY,
                secret_key=settings.MINIO_SECRET_KEY,
                secure=settings.MINIO_SECURE,
            )
        return self._client

    @staticmethod
    def key_for(day: date) -> str:
        return f"{settings.ACTIVITY_SNAPSHOT_PREFIX}/{day:%Y}/{day:%m}/{day:%d}.json"

    def create_snapshot_for_date(self, db: Session, day: date) -> Dict[str, Any]:
        """Serialize ``day``'s activity logs and store them as one object.

        Raises:
            SnapshotError: If no bucket is configured or the upload fails.
        """
        if not settings.snapshots_enabled:
            raise SnapshotError("Activity snapshots are disabled: ACTIVITY_SNAPSHOT_BUCKET not set")

        logs = activity_service.logs_for_day(db, day)
        key = self.key_for(day)
        body = json.dumps(
            {
                "date": day.isoformat(),
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "count": len(logs),
                "logs": [ActivityLogOut.model_validate(log).model_dump(mode="json") for log in logs],
            },
            indent=2,
        ).encode("utf-8")

        bucket = settings.ACTIVITY_SNAPSHOT_BUCKET
        try:
            if not self.client.bucket_exists(bucket):
                self.client.make_bucket(bucket)
            self.client.put_object(
                bucket,
                key,
                io.BytesIO(body),
                length=len(body),
                content_type="application/json",
            )
        except S3Error as e:
            logger.error("Snapshot upload failed for %s: %s", key, e)
            raise SnapshotError(f"Snapshot upload failed: {e.code}")
        except HTTPError as e:
            logger.error("Object store unreachable while writing %s: %s", key, e)
            raise SnapshotError("Snapshot upload failed: object store unreachable")

        logger.info("Activity snapshot %s written (%d entries)", key, len(logs))
        return {"key": key, "count": len(logs)}


snapshot_service = SnapshotService()
