"""
Background execution of roster imports.

Jobs run on daemon threads tracked in ACTIVE_THREADS. Cancellation is
cooperative: the worker re-reads the job status between rows and stops,
keeping whatever rows were already committed.
"""
import logging
import threading

from django.conf import settings
from django.db import connection, transaction
from django.utils import timezone

from admin_panel.notifications import create_notification
from admin_panel.utils import log_admin_activity
from internship_tracking_system.exceptions import BadRequestError
from . import push
from .importers import IMPORTERS, RowError, read_rows
from .models import UploadJob, ProgressMessage

logger = logging.getLogger(__name__)

ACTIVE_THREADS = {}
_LOCK = threading.Lock()

COUNTER_FIELDS = ['total_rows', 'processed_rows', 'successful_rows', 'error_rows', 'skipped_rows', 'errors']


def start_import(job):
    """Run inline when IMPORT_RUN_SYNC is set, otherwise on a daemon thread"""
    if settings.IMPORT_RUN_SYNC:
        run_import(job.id)
        return None

    thread = threading.Thread(target=_run_in_thread, args=(job.id,), daemon=True, name=f"excel-import-{job.id}")
    with _LOCK:
        ACTIVE_THREADS[job.id] = thread
    thread.start()
    return thread


def _run_in_thread(job_id):
    try:
        run_import(job_id)
    except Exception as e:
        logger.error(f"Import job {job_id} crashed: {str(e)}")
    finally:
        with _LOCK:
            ACTIVE_THREADS.pop(job_id, None)
        connection.close()


def is_cancelled(job_id):
    return UploadJob.objects.filter(pk=job_id, status=UploadJob.STATUS_CANCELLED).exists()


def _progress(job):
    job.save(update_fields=COUNTER_FIELDS)
    push.broadcast(
        job,
        ProgressMessage.TYPE_PROGRESS,
        f"{job.processed_rows}/{job.total_rows} satır işlendi",
        {'percentage': job.percentage, **job.summary()},
    )


def _finish(job, status, msg_type, message, error_message=None):
    job.save(update_fields=COUNTER_FIELDS)
    updated = UploadJob.objects.filter(pk=job.pk).exclude(status=UploadJob.STATUS_CANCELLED).update(
        status=status, finished_at=timezone.now(), error_message=error_message
    )
    if updated:
        job.status = status
        push.broadcast(job, msg_type, message, job.summary())
        if status == UploadJob.STATUS_FAILED:
            create_notification(
                title="Excel İçe Aktarma Başarısız",
                message=f"{job.original_name}: {error_message or message}",
                priority="HIGH",
                user=job.uploaded_by,
            )
    return job


def run_import(job_id):
    job = UploadJob.objects.get(pk=job_id)
    if job.status != UploadJob.STATUS_QUEUED:
        logger.info(f"Import job {job_id} is {job.status}, not starting")
        return job

    UploadJob.objects.filter(pk=job_id).update(status=UploadJob.STATUS_PROCESSING, started_at=timezone.now())
    job.status = UploadJob.STATUS_PROCESSING
    importer = IMPORTERS[job.file_type](job)

    try:
        rows = read_rows(job.file.path)
    except Exception as e:
        logger.error(f"Import job {job_id} could not read {job.original_name}: {str(e)}")
        return _finish(job, UploadJob.STATUS_FAILED, ProgressMessage.TYPE_FAILED,
                       "Excel dosyası okunamadı", error_message=str(e))

    start = importer.first_data_index(rows)
    data_rows = rows[start:]
    job.total_rows = len(data_rows)
    push.broadcast(job, ProgressMessage.TYPE_PROGRESS, "İşlem başladı", {'percentage': 0, **job.summary()})

    interval = max(settings.IMPORT_PROGRESS_INTERVAL, 1)
    errors = []
    for offset, values in enumerate(data_rows):
        if is_cancelled(job_id):
            logger.info(f"Import job {job_id} cancelled after {job.processed_rows} rows")
            job.save(update_fields=COUNTER_FIELDS)
            return job

        row_number = start + offset + 1
        job.processed_rows += 1

        if importer.is_empty(values):
            job.skipped_rows += 1
        else:
            try:
                with transaction.atomic():
                    importer.process_row(values)
                job.successful_rows += 1
            except RowError as e:
                job.error_rows += 1
                errors.append(f"Satır {row_number}: {e}")
            except Exception as e:
                logger.error(f"Import job {job_id} row {row_number} failed: {str(e)}")
                job.error_rows += 1
                errors.append(f"Satır {row_number}: {e}")
        job.errors = errors[:100]

        if job.processed_rows % interval == 0:
            _progress(job)

    _progress(job)

    attempted = job.successful_rows + job.error_rows
    if job.error_rows * 2 < max(attempted, 1):
        _finish(job, UploadJob.STATUS_COMPLETED, ProgressMessage.TYPE_COMPLETE,
                f"{job.successful_rows} satır başarıyla işlendi, {job.error_rows} satırda hata")
    else:
        _finish(job, UploadJob.STATUS_FAILED, ProgressMessage.TYPE_FAILED,
                f"İçe aktarma başarısız: {job.error_rows}/{attempted} satırda hata",
                error_message="; ".join(errors[:10]))

    log_admin_activity(
        user=job.uploaded_by,
        actor_label='system',
        action='IMPORT',
        model_name='UploadJob',
        object_id=job.id,
        description=f"{job.file_type} import {job.status}: {job.summary()['successfulRows']} ok, {job.error_rows} errors",
    )
    return job


def cancel(job, user=None):
    with transaction.atomic():
        job = UploadJob.objects.select_for_update().get(pk=job.pk)
        if not job.is_active:
            raise BadRequestError("Sadece kuyrukta veya işlenmekte olan yüklemeler iptal edilebilir.")
        job.status = UploadJob.STATUS_CANCELLED
        job.finished_at = timezone.now()
        job.save(update_fields=['status', 'finished_at'])
    push.broadcast(job, ProgressMessage.TYPE_CANCELLED, "Dosya yükleme iptal edildi", job.summary())
    log_admin_activity(
        user=user,
        action='CANCEL',
        model_name='UploadJob',
        object_id=job.id,
        description=f"Cancelled import of {job.original_name}",
    )
    return job
