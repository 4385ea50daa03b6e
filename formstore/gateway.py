"""
Save, list and export contact-form submissions.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from formstore.connection import RemoteError, RemoteStore
from formstore.errors import (
    DuplicateSubmission,
    InvalidSubmission,
    PermissionDenied,
    RemoteFailure,
    SubmissionError,
)
from formstore.schemas import Submission, SubmissionInput

logger = logging.getLogger(__name__)

TABLE = "contact_submissions"

# Postgres SQLSTATE codes passed through by PostgREST
INSUFFICIENT_PRIVILEGE = "42501"
UNIQUE_VIOLATION = "23505"

NOTHING_TO_EXPORT = "No form submissions to export"
EXPORT_MEDIA_TYPE = "application/json"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2025-01-31T09:15:02.123Z."""
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def export_filename(day: datetime) -> str:
    return f"form_submissions_{day.astimezone(timezone.utc).date().isoformat()}.json"


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    media_type: str = EXPORT_MEDIA_TYPE


def _log_notice(message: str) -> None:
    logger.warning(message)


def _describe_invalid(exc: ValidationError) -> str:
    fields = []
    for err in exc.errors():
        name = str(err["loc"][0]) if err.get("loc") else "submission"
        if name not in fields:
            fields.append(name)
    return f"Missing or invalid fields: {', '.join(fields)}"


class SubmissionGateway:
    """
    Front door for contact-form submissions.

    ``save`` and ``fetch_all`` raise ``SubmissionError`` subclasses with a
    readable message; ``export_all`` never raises and reports through a
    notifier instead, since nothing upstream of it would show the error.
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        export_dir: Union[str, Path] = ".",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.export_dir = Path(export_dir)
        self.clock = clock

    def save(self, data: Union[SubmissionInput, Mapping[str, Any]]) -> Submission:
        """
        Insert one submission and return the row that was sent.

        The returned ``created_at`` is the client's clock; no second request
        is made to read back what the server stored.
        """
        try:
            payload = (
                data
                if isinstance(data, SubmissionInput)
                else SubmissionInput.model_validate(data)
            )
        except ValidationError as exc:
            logger.warning("Rejected submission: %s", exc)
            raise InvalidSubmission(_describe_invalid(exc)) from exc

        submission = Submission.from_input(payload, iso_timestamp(self.clock()))
        try:
            self.store.insert(TABLE, [submission.as_row()])
        except RemoteError as exc:
            logger.error("Error saving form data: %r", exc)
            if exc.code == INSUFFICIENT_PRIVILEGE:
                raise PermissionDenied(
                    "Permission denied. Please try again later."
                ) from exc
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateSubmission("This submission already exists.") from exc
            raise RemoteFailure(exc.message or "Failed to save form data") from exc
        return submission

    def fetch_all(self) -> list[Submission]:
        """Every stored submission, newest first."""
        try:
            rows = self.store.select(TABLE, "*", order_by="created_at", descending=True)
        except RemoteError as exc:
            logger.error("Error retrieving form submissions: %r", exc)
            if exc.code == INSUFFICIENT_PRIVILEGE:
                raise PermissionDenied(
                    "Permission denied. Please sign in to view submissions."
                ) from exc
            raise RemoteFailure(
                exc.message or "Failed to retrieve submissions"
            ) from exc

        try:
            return [Submission.model_validate(row) for row in rows or []]
        except ValidationError as exc:
            logger.error("Malformed submission rows: %s", exc)
            raise RemoteFailure("Failed to retrieve submissions") from exc

    def render_export(self, submissions: list[Submission]) -> ExportFile:
        rows = [submission.model_dump(mode="json") for submission in submissions]
        content = json.dumps(rows, indent=2, ensure_ascii=False).encode("utf-8")
        return ExportFile(filename=export_filename(self.clock()), content=content)

    def export_all(
        self,
        destination: Optional[Union[str, Path]] = None,
        notify: Optional[Callable[[str], None]] = None,
    ) -> Optional[Path]:
        """
        Write every submission to ``form_submissions_<date>.json``.

        Returns the written path, or None when there was nothing to export
        or the export failed; either way ``notify`` has been told why.
        """
        notify = notify or _log_notice
        try:
            submissions = self.fetch_all()
            if not submissions:
                notify(NOTHING_TO_EXPORT)
                return None
            export = self.render_export(submissions)
            return self._deliver(export, Path(destination or self.export_dir))
        except (SubmissionError, OSError, TypeError, ValueError) as exc:
            logger.exception("Error exporting submissions")
            notify(str(exc) or "Failed to export submissions")
            return None

    def _deliver(self, export: ExportFile, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / export.filename
        handle = tempfile.NamedTemporaryFile(
            dir=directory, prefix=".export-", suffix=".part", delete=False
        )
        try:
            with handle:
                handle.write(export.content)
            os.replace(handle.name, target)
        finally:
            if os.path.exists(handle.name):
                os.unlink(handle.name)
        logger.info("Exported submissions to %s", target)
        return target
