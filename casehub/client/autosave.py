"""
Debounced auto-save for a test run being executed.

The execution screen edits steps one keystroke at a time. Edits are merged
into a per-step pending patch and sent as one ``PUT /test-runs/<id>``
after ``debounce_seconds`` of quiet, or immediately on ``flush()``.

State rules:
    - local state is replaced by every successful save response (last
      response wins); edits queued while a save was in flight are laid
      back on top of it
    - a failed save keeps its edits pending, under any newer edits, and
      sets ``save_failed``; the next save retries them
    - a save refused with 409 (run locked on the server) drops its step
      patches, keeps its status and reloads the run from the server
    - in-flight saves are never cancelled
    - while the local run is passed/failed, ``edit_step`` raises
      RunLockedError and queues nothing
"""

from __future__ import annotations

import copy
import logging
import threading

from casehub.client.gateway import GatewayError, TestRunGateway
from casehub.core.exceptions import RunLockedError
from casehub.models.testing import is_locked

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.8

# keyword argument -> API field
_STEP_FIELDS = {
    "actual_results": "actualResults",
    "actual_result_attachments": "actualResultAttachments",
    "checked": "checked",
    "step_status": "stepStatus",
}


class RunAutosaveSession:
    """Local copy of one test run plus its unsaved edits."""

    def __init__(
        self,
        gateway: TestRunGateway,
        run: dict,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        timer_factory=threading.Timer,
    ) -> None:
        self.gateway = gateway
        self.run = run
        self.debounce_seconds = debounce_seconds
        self.save_failed = False
        self._timer_factory = timer_factory
        self._timer = None
        self._pending_steps: dict[int, dict] = {}
        self._pending_status: str | None = None
        self._lock = threading.RLock()

    @classmethod
    def open(cls, gateway: TestRunGateway, run_id, **kwargs) -> "RunAutosaveSession":
        """Fetch the run and start a session on it."""
        return cls(gateway, gateway.get_run(run_id), **kwargs)

    # ── State ────────────────────────────────────────────────────────────

    @property
    def run_id(self):
        return self.run["id"]

    @property
    def is_locked(self) -> bool:
        return is_locked(self.run.get("status"))

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending_steps) or self._pending_status is not None

    def step(self, step_id: int) -> dict:
        for step in self.run.get("steps", []):
            if step["id"] == step_id:
                return step
        raise KeyError(step_id)

    # ── Edits ────────────────────────────────────────────────────────────

    def edit_step(self, step_id: int, **fields) -> None:
        """Queue field changes for one step and restart the debounce timer.

        Accepted fields: actual_results, actual_result_attachments, checked,
        step_status.
        """
        unknown = set(fields) - set(_STEP_FIELDS)
        if unknown:
            raise TypeError(f"Unknown step fields: {', '.join(sorted(unknown))}")

        with self._lock:
            if self.is_locked:
                raise RunLockedError(self.run["status"])
            patch = {_STEP_FIELDS[name]: value for name, value in fields.items()}
            self.step(step_id).update(copy.deepcopy(patch))
            self._pending_steps.setdefault(step_id, {}).update(patch)
            self._schedule()

    def set_status(self, status: str) -> None:
        """Queue a run status change; allowed whether or not the run is locked."""
        with self._lock:
            self.run["status"] = status
            self._pending_status = status
            self._schedule()

    def remove_actual_attachment(self, step_id: int, attachment_id: str) -> None:
        """Drop an actual-result attachment locally and delete its file.

        The file delete is best-effort: a failure is logged and otherwise
        ignored, the step edit is queued either way.
        """
        current = self.step(step_id).get("actualResultAttachments") or []
        remaining = [a for a in current if a.get("id") != attachment_id]
        self.edit_step(step_id, actual_result_attachments=remaining)
        try:
            self.gateway.delete_attachment(attachment_id)
        except GatewayError as exc:
            logger.warning("Could not delete attachment %s: %s", attachment_id, exc)

    # ── Saving ───────────────────────────────────────────────────────────

    def _schedule(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._timer_factory(self.debounce_seconds, self._on_timer)
        self._timer.daemon = True
        self._timer.start()

    def _on_timer(self) -> None:
        self.flush()

    def _take_pending(self):
        steps, status = self._pending_steps, self._pending_status
        self._pending_steps, self._pending_status = {}, None
        return steps, status

    def _payload(self, steps: dict, status: str | None) -> dict:
        payload = {}
        if status is not None:
            payload["status"] = status
        if steps:
            payload["steps"] = [{"id": sid, **fields} for sid, fields in steps.items()]
        return payload

    def flush(self) -> bool:
        """Send pending edits now. Returns True when nothing is left unsaved."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if not self._pending_steps and self._pending_status is None:
                return True
            steps, status = self._take_pending()

        try:
            response = self.gateway.update_run(self.run_id, self._payload(steps, status))
        except GatewayError as exc:
            logger.warning("Auto-save of test run %s failed: %s", self.run_id, exc)
            if exc.status_code == 409:
                self._on_locked_conflict(status)
                return False
            with self._lock:
                for sid, fields in steps.items():
                    newer = self._pending_steps.get(sid, {})
                    self._pending_steps[sid] = {**fields, **newer}
                if self._pending_status is None:
                    self._pending_status = status
                self.save_failed = True
            return False

        with self._lock:
            self.run = response
            for sid, fields in self._pending_steps.items():
                try:
                    self.step(sid).update(copy.deepcopy(fields))
                except KeyError:
                    continue
            if self._pending_status is not None:
                self.run["status"] = self._pending_status
            self.save_failed = False
            return not self.has_pending

    def _on_locked_conflict(self, sent_status: str | None) -> None:
        """The server refused step edits because the run is locked there.

        The refused step patches are dropped; resending them can only fail
        until the status changes. A status that was part of the refused
        save stays pending, and the server's copy of the run replaces the
        local one so ``is_locked`` reflects it.
        """
        try:
            fresh = self.gateway.get_run(self.run_id)
        except GatewayError as exc:
            logger.warning("Could not reload test run %s: %s", self.run_id, exc)
            fresh = None

        with self._lock:
            if self._pending_status is None:
                self._pending_status = sent_status
            if fresh is not None:
                self.run = fresh
                for sid, fields in self._pending_steps.items():
                    try:
                        self.step(sid).update(copy.deepcopy(fields))
                    except KeyError:
                        continue
            if self._pending_status is not None:
                self.run["status"] = self._pending_status
            self.save_failed = True

    def close(self) -> bool:
        """Flush outstanding edits; call when leaving the run."""
        return self.flush()
