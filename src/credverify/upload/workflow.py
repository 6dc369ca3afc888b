"""Upload workflow: owns the single snapshot of the current attempt.

User intents (select, submit, clear) and transfer outcomes are turned into
transitions here.  Each transition is validated by
:func:`credverify.upload.fsm.next_state` and then committed as one new
:class:`~credverify.models.WorkflowSnapshot`; nothing patches individual
fields, so the selected file, progress and result/error are always reset
together.

Stale outcomes
--------------
The workflow cannot cancel an in-flight transfer.  Instead a generation
counter is bumped on every submit, selection and clear, and each transfer
remembers the generation it started under.  When its outcome arrives under
a newer generation it is dropped without touching the snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from credverify.constants import GENERIC_UPLOAD_ERROR, UPLOAD_CANCELLED_MESSAGE
from credverify.models import (
    ClientConfig,
    SelectedFile,
    UploadPhase,
    UploadProgress,
    WorkflowSnapshot,
    WorkflowState,
)
from credverify.upload.client import CredentialServiceClient
from credverify.upload.exceptions import (
    CatalogUnavailableError,
    CredentialUploadError,
    InvalidStateError,
    SizeLimitExceededError,
)
from credverify.upload.fsm import next_state
from credverify.upload.progress import ProgressEstimator
from credverify.upload.schemas import FileInfoResult, FormatCatalog

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[WorkflowSnapshot], None]


class UploadWorkflow:
    """Single-attempt upload state machine for one user session.

    Usage::

        async with CredentialServiceClient(config) as client:
            workflow = UploadWorkflow(client)
            await workflow.load_catalog()
            workflow.select_file(SelectedFile.from_path("vc.json"))
            snapshot = await workflow.submit()
            if snapshot.state is WorkflowState.COMPLETED:
                render(snapshot.result)
    """

    def __init__(
        self,
        client: CredentialServiceClient,
        config: ClientConfig | None = None,
    ) -> None:
        self._client = client
        self._config = config or client.config
        self._snapshot = WorkflowSnapshot()
        self._generation = 0
        self._catalog: FormatCatalog | None = None
        self._listeners: list[SnapshotListener] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> WorkflowSnapshot:
        return self._snapshot

    @property
    def state(self) -> WorkflowState:
        return self._snapshot.state

    @property
    def catalog(self) -> FormatCatalog | None:
        return self._catalog

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call *listener* with every committed snapshot.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Format catalog
    # ------------------------------------------------------------------

    async def load_catalog(self) -> FormatCatalog | None:
        """Fetch the format catalog once; a failure just leaves it absent."""
        if self._catalog is not None:
            return self._catalog
        try:
            self._catalog = await self._client.fetch_format_catalog()
        except CatalogUnavailableError as exc:
            logger.warning("Failed to load supported formats: %s", exc)
            return None
        logger.debug("Loaded %d supported formats", len(self._catalog.supported))
        return self._catalog

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def select_file(self, file: SelectedFile) -> WorkflowSnapshot:
        """Make *file* the subject of a new attempt.

        Raises:
            SizeLimitExceededError: *file* is over ``config.max_file_size``.
                The current snapshot is left exactly as it was.
        """
        if file.size > self._config.max_file_size:
            logger.info(
                "Rejected %s: %d bytes exceeds %d byte limit",
                file.name,
                file.size,
                self._config.max_file_size,
            )
            raise SizeLimitExceededError(file.name, file.size, self._config.max_file_size)

        state = next_state(self._snapshot.state, "choose")
        if self._snapshot.in_flight:
            logger.info("Selection of %s supersedes attempt %d", file.name, self._generation)
        self._generation += 1
        return self._commit(
            WorkflowSnapshot(state=state, selected_file=file, attempt=self._generation)
        )

    def select_path(self, path: Path | str) -> WorkflowSnapshot:
        """Convenience wrapper: stat *path* and select it."""
        return self.select_file(SelectedFile.from_path(path))

    def clear(self) -> WorkflowSnapshot:
        """Discard the current attempt and return to idle."""
        state = next_state(self._snapshot.state, "reset")
        if self._snapshot.in_flight:
            logger.info("Clear supersedes attempt %d", self._generation)
        self._generation += 1
        return self._commit(WorkflowSnapshot(state=state, attempt=self._generation))

    async def submit(self, description: str | None = None) -> WorkflowSnapshot:
        """Send the selected file and wait for the backend's analysis.

        Returns:
            The snapshot current when the outcome was handled.  If the
            attempt was superseded while in flight this is the newer
            attempt's snapshot, untouched by the stale outcome.

        Raises:
            InvalidStateError: No file is selected, or a transfer is already
                in flight.  Nothing is changed.
        """
        current = self._snapshot
        if current.selected_file is None or current.in_flight:
            raise InvalidStateError("submit", current.state.value)
        state = next_state(current.state, "start_upload")

        self._generation += 1
        token = self._generation
        file = current.selected_file
        self._commit(
            replace(
                current,
                state=state,
                progress=UploadProgress(0, UploadPhase.UPLOADING),
                result=None,
                error=None,
                attempt=token,
            )
        )
        logger.debug("Attempt %d: submitting %s (%d bytes)", token, file.name, file.size)

        estimator = ProgressEstimator(
            on_tick=lambda percent: self._on_estimate(token, percent),
            interval=self._config.progress_interval,
            step=self._config.progress_step,
            cap=self._config.progress_cap,
        )
        estimator.start()
        try:
            try:
                result = await self._client.submit_file(file, description)
            finally:
                await estimator.stop()
        except CredentialUploadError as exc:
            return self._resolve_failure(token, str(exc))
        except asyncio.CancelledError:
            self._resolve_failure(token, UPLOAD_CANCELLED_MESSAGE)
            raise
        except Exception:
            logger.exception("Attempt %d: unexpected error during upload", token)
            self._resolve_failure(token, GENERIC_UPLOAD_ERROR)
            raise
        return self._resolve_success(token, result)

    # ------------------------------------------------------------------
    # Outcome handling
    # ------------------------------------------------------------------

    def _is_stale(self, token: int) -> bool:
        return token != self._generation

    def _on_estimate(self, token: int, percent: int) -> None:
        if self._is_stale(token) or not self._snapshot.in_flight:
            return
        self._commit(
            replace(self._snapshot, progress=UploadProgress(percent, UploadPhase.UPLOADING))
        )

    def _resolve_success(self, token: int, result: FileInfoResult) -> WorkflowSnapshot:
        if self._is_stale(token):
            logger.debug("Dropping stale result for attempt %d", token)
            return self._snapshot
        state = next_state(self._snapshot.state, "finish_upload")
        return self._commit(
            replace(
                self._snapshot,
                state=state,
                progress=UploadProgress(100, UploadPhase.COMPLETED),
                result=result,
                error=None,
            )
        )

    def _resolve_failure(self, token: int, message: str) -> WorkflowSnapshot:
        if self._is_stale(token):
            logger.debug("Dropping stale failure for attempt %d: %s", token, message)
            return self._snapshot
        message = message.strip() or GENERIC_UPLOAD_ERROR
        logger.warning("Attempt %d failed: %s", token, message)
        state = next_state(self._snapshot.state, "fail_upload")
        return self._commit(
            replace(
                self._snapshot,
                state=state,
                progress=UploadProgress(0, UploadPhase.ERROR),
                result=None,
                error=message,
            )
        )

    def _commit(self, snapshot: WorkflowSnapshot) -> WorkflowSnapshot:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot


def is_accepted_extension(file: SelectedFile, accepted: list[str] | tuple[str, ...]) -> bool:
    """Advisory check of *file*'s extension against the selection filter."""
    return file.extension in {ext.lower() for ext in accepted}
