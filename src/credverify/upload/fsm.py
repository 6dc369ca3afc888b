"""Upload workflow finite state machine.

A fresh FSM instance is created at the workflow's current state for every
transition and used to validate legality before
:class:`~credverify.upload.workflow.UploadWorkflow` commits the new
snapshot.

The FSM is purely a validation tool -- it does NOT hold the selected file,
progress or result, and has no on_enter_state callbacks.  The snapshot
owned by the workflow is the single source of truth.
"""

from __future__ import annotations

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from credverify.models import WorkflowState
from credverify.upload.exceptions import InvalidStateError


class UploadWorkflowSM(StateMachine):
    """Five-state lifecycle of a single upload attempt.

    States:
        idle      -- No file selected.
        selected  -- A file passed client-side validation, not yet sent.
        uploading -- Transfer in flight, awaiting the backend's analysis.
        completed -- Backend returned a FileInfoResult.
        errored   -- Transfer was rejected or failed.

    Selection and reset are legal from every state, including uploading:
    they supersede the in-flight attempt rather than cancel it.

    No state has ``final=True``; every attempt can be replaced by a new one.
    """

    idle = State("idle", initial=True, value="idle")
    selected = State("selected", value="selected")
    uploading = State("uploading", value="uploading")
    completed = State("completed", value="completed")
    errored = State("errored", value="errored")

    choose = (
        idle.to(selected)
        | selected.to.itself()
        | uploading.to(selected)
        | completed.to(selected)
        | errored.to(selected)
    )
    start_upload = selected.to(uploading)
    finish_upload = uploading.to(completed)
    fail_upload = uploading.to(errored)
    reset = (
        idle.to.itself()
        | selected.to(idle)
        | uploading.to(idle)
        | completed.to(idle)
        | errored.to(idle)
    )


def create_fsm(current_state: WorkflowState | str) -> UploadWorkflowSM:
    """Create an FSM instance positioned at *current_state*."""
    return UploadWorkflowSM(start_value=WorkflowState(current_state).value)


def next_state(current_state: WorkflowState, event: str) -> WorkflowState:
    """Return the state reached by firing *event* from *current_state*.

    Raises:
        InvalidStateError: If *event* is not legal from *current_state*.
    """
    fsm = create_fsm(current_state)
    try:
        fsm.send(event)
    except TransitionNotAllowed as exc:
        raise InvalidStateError(event.replace("_", " "), current_state.value) from exc
    return WorkflowState(fsm.current_state.value)
