"""Batch photo upload: validate, store blob, then write its record."""
import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from homerecall.core.exceptions import StorageError, UploadError, ValidationError
from homerecall.services.storage.object_store import ObjectStoreGateway
from homerecall.utils.validators import validate_batch_size

logger = logging.getLogger(__name__)

STAGE_STARTED = 0
STAGE_BLOB_STORED = 50
STAGE_RECORD_STORED = 100


@dataclass
class UploadFile:
    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FileRejection:
    filename: str
    reason: str


@dataclass
class UploadProgress:
    filename: str
    percent: int


@dataclass
class UploadTarget:
    """
    Where a batch goes.

    Args:
        prefix: Object key prefix for every file in the batch
        record_writer: Called as record_writer(file, path) after the blob is
            stored; returns the created metadata record
        existing_count: Photos already attached to the target
    """
    prefix: str
    record_writer: Callable[[UploadFile, str], Any]
    existing_count: int = 0


@dataclass
class BatchResult:
    records: List[Any] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)
    rejections: List[FileRejection] = field(default_factory=list)


class UploadOrchestrator:
    """
    Runs a batch of uploads against one gateway.

    Validation is lenient: a bad file is rejected on its own and the rest go
    ahead. Uploading is strict: the first failure once files are in flight
    cancels the remaining work and fails the batch. Files that already
    finished are not rolled back.
    """

    def __init__(self, gateway: ObjectStoreGateway):
        self.gateway = gateway

    @staticmethod
    async def _run_blocking(fn, *args, **kwargs):
        """Run a blocking function in the default threadpool so async event loop isn't blocked."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args, **kwargs))

    @staticmethod
    def _report(on_progress, filename: str, percent: int) -> None:
        if on_progress:
            on_progress(UploadProgress(filename=filename, percent=percent))

    async def _upload_one(
        self,
        upload: UploadFile,
        target: UploadTarget,
        on_progress,
        semaphore: asyncio.Semaphore,
        record_lock: asyncio.Lock,
        writes: List[asyncio.Future]
    ):
        async with semaphore:
            self._report(on_progress, upload.filename, STAGE_STARTED)
            path = self.gateway.generate_key(target.prefix, upload.filename)

            try:
                await self._run_blocking(
                    self.gateway.upload,
                    upload.content,
                    path,
                    upload.content_type,
                    upload.filename,
                )
            except StorageError as e:
                raise UploadError(f"Failed to upload {upload.filename}: {e.message}", cause=e)
            self._report(on_progress, upload.filename, STAGE_BLOB_STORED)

            # Record writers share the request's session: one write at a time.
            async with record_lock:
                write = asyncio.ensure_future(self._run_blocking(target.record_writer, upload, path))
                writes.append(write)
                try:
                    record = await asyncio.shield(write)
                except SQLAlchemyError as e:
                    logger.error(f"Blob stored at {path} but record write failed: {e}")
                    raise UploadError(f"Failed to save {upload.filename}: {str(e)}", cause=e)
            self._report(on_progress, upload.filename, STAGE_RECORD_STORED)

            return path, record

    async def upload_batch(
        self,
        files: List[UploadFile],
        target: UploadTarget,
        on_progress: Optional[Callable[[UploadProgress], None]] = None,
        max_concurrency: Optional[int] = None
    ) -> BatchResult:
        """
        Upload a batch of files to a target.

        Args:
            files: Files to upload
            target: Key prefix and record writer
            on_progress: Called at 0, 50 and 100 percent per file
            max_concurrency: Files in flight at once; 1 uploads sequentially

        Returns:
            BatchResult with one record and path per accepted file, plus
            the rejected files and their reasons

        Raises:
            ValidationError: Accepted files would push the target past its photo cap
            UploadError: A file failed once uploads had started
        """
        result = BatchResult()
        accepted: List[UploadFile] = []
        for upload in files:
            try:
                self.gateway.validate(upload.filename, upload.size, upload.content_type)
            except ValidationError as e:
                result.rejections.append(FileRejection(filename=upload.filename, reason=e.message))
                continue
            accepted.append(upload)

        validate_batch_size(len(accepted), self.gateway.policy, target.existing_count)
        if not accepted:
            return result

        semaphore = asyncio.Semaphore(max_concurrency or len(accepted))
        record_lock = asyncio.Lock()
        writes: List[asyncio.Future] = []
        tasks = [
            asyncio.ensure_future(
                self._upload_one(upload, target, on_progress, semaphore, record_lock, writes)
            )
            for upload in accepted
        ]

        try:
            outcomes = await asyncio.gather(*tasks)
        except UploadError as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await asyncio.gather(*writes, return_exceptions=True)
            logger.error(f"Upload batch to {target.prefix} aborted: {e.message}")
            raise

        for path, record in outcomes:
            result.paths.append(path)
            result.records.append(record)

        logger.info(
            f"Uploaded {len(result.paths)} file(s) to {target.prefix}, "
            f"{len(result.rejections)} rejected"
        )
        return result
