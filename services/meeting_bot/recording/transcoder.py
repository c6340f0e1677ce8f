"""
Recording sink for one bot session.

Chunks produced by the capture extension are appended to a local file. When
the recording is stopped the file is finalized, and it can then be uploaded
to S3. The upload flag tells the cleanup sequence whether that already
happened.
"""
import asyncio
import logging
import os
from datetime import datetime
from typing import Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from shared.config import get_settings

from ..exceptions import TranscoderError, UploadError

logger = logging.getLogger(__name__)
settings = get_settings()


class Transcoder:
    """Writes recording chunks to disk and ships the result to S3."""

    def __init__(
        self,
        session_id: str,
        output_dir: Optional[str] = None,
        s3_bucket: Optional[str] = None,
        s3_key: Optional[str] = None,
        upload_on_stop: Optional[bool] = None,
        s3_client=None,
    ):
        self.session_id = session_id
        self.output_dir = output_dir or settings.recording_dir
        self.s3_bucket = s3_bucket or settings.s3_bucket
        self.s3_key = s3_key or f"recordings/{session_id}.webm"
        self.upload_on_stop = settings.upload_on_stop if upload_on_stop is None else upload_on_stop
        self.output_path = os.path.join(self.output_dir, f"{session_id}.webm")

        self.s3_client = s3_client
        self.is_recording = False
        self.is_paused = False
        self.bytes_written = 0
        self.started_at: Optional[datetime] = None
        self.stopped_at: Optional[datetime] = None
        self._file = None
        self._files_uploaded = False
        self._write_lock = asyncio.Lock()

    async def start(self) -> None:
        """Open the output file."""
        if self.is_recording:
            return

        try:
            os.makedirs(self.output_dir, exist_ok=True)
            self._file = open(self.output_path, "wb")
        except OSError as e:
            raise TranscoderError(f"Cannot open recording file {self.output_path}: {e}") from e

        self.is_recording = True
        self.started_at = datetime.utcnow()
        logger.info(f"🎬 Recording started: {self.output_path}")

    async def write_chunk(self, data: bytes) -> None:
        """Append a chunk. Chunks arriving while paused or stopped are dropped."""
        async with self._write_lock:
            if not self.is_recording or self.is_paused or self._file is None:
                return
            await asyncio.to_thread(self._file.write, data)
            self.bytes_written += len(data)

    async def pause(self) -> None:
        if self.is_recording and not self.is_paused:
            self.is_paused = True
            logger.info("Recording paused")

    async def resume(self) -> None:
        if self.is_recording and self.is_paused:
            self.is_paused = False
            logger.info("Recording resumed")

    async def stop(self) -> None:
        """Finalize the recording file, uploading it when configured to."""
        async with self._write_lock:
            if self._file is not None:
                try:
                    await asyncio.to_thread(self._close_file, self._file)
                except OSError as e:
                    raise TranscoderError(f"Cannot finalize recording file: {e}") from e
                finally:
                    self._file = None

        if self.is_recording:
            self.is_recording = False
            self.is_paused = False
            self.stopped_at = datetime.utcnow()
            logger.info(f"⏹️  Recording stopped ({self.bytes_written} bytes)")

        if self.upload_on_stop and not self._files_uploaded:
            await self.upload_to_s3()

    async def upload_to_s3(self) -> None:
        """Upload the finalized recording to S3."""
        if self.bytes_written == 0:
            logger.info("Nothing was recorded, skipping upload")
            return
        if not os.path.exists(self.output_path):
            raise UploadError(f"Recording file not found: {self.output_path}")

        try:
            client = self._get_s3_client()
            await asyncio.to_thread(client.upload_file, self.output_path, self.s3_bucket, self.s3_key)
        except (BotoCoreError, ClientError, S3UploadFailedError) as e:
            raise UploadError(f"Upload to s3://{self.s3_bucket}/{self.s3_key} failed: {e}") from e

        self._files_uploaded = True
        logger.info(f"☁️  Recording uploaded to s3://{self.s3_bucket}/{self.s3_key}")

    @staticmethod
    def _close_file(file) -> None:
        file.flush()
        file.close()

    def get_files_uploaded(self) -> bool:
        return self._files_uploaded

    def _get_s3_client(self):
        if self.s3_client is None:
            self.s3_client = boto3.client("s3", region_name=settings.aws_region)
        return self.s3_client
