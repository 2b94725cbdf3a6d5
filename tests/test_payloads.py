"""Tests for button values and modal metadata."""
import json

from taskbot.schemas.payloads import (
    ButtonValue,
    ModalState,
    NavigationContext,
    TaskFormState,
    UpdateFormState,
    ViewMode,
)


def test_button_value_with_origin():
    assert ButtonValue("U123", ViewMode.PINNED).encode() == "U123:pinned"

    decoded = ButtonValue.decode("U123:people")
    assert decoded.target_id == "U123"
    assert decoded.origin == ViewMode.PEOPLE


def test_button_value_without_origin():
    decoded = ButtonValue.decode("U123")

    assert decoded.target_id == "U123"
    assert decoded.origin is None


def test_button_value_unknown_origin():
    decoded = ButtonValue.decode("U123:somewhere")

    assert decoded.target_id == "U123"
    assert decoded.origin is None


def test_button_value_ignores_trailing_fields():
    assert ButtonValue.decode("U1:pinned:x") == ButtonValue("U1", ViewMode.PINNED)
    assert ButtonValue.decode("U1::pinned").origin is None


def test_modal_state_single_tenant_is_bare_id():
    assert ModalState("U42").encode() == "U42"
    assert ModalState.decode("U42") == ModalState("U42", None)


def test_modal_state_multi_tenant_is_json():
    raw = ModalState("U42", "T9").encode()

    assert json.loads(raw) == {"targetUserId": "U42", "teamId": "T9"}
    assert ModalState.decode(raw) == ModalState("U42", "T9")


def test_modal_state_bare_id_picks_up_payload_team():
    assert ModalState.decode("U42", team_id="T9") == ModalState("U42", "T9")


def test_modal_state_non_object_json_is_an_id():
    assert ModalState.decode("12345").target_user_id == "12345"
    assert ModalState.decode(None).target_user_id == ""


def test_task_form_state():
    assert TaskFormState("T1").encode() == "T1"
    assert TaskFormState.decode("").team_id is None
    assert TaskFormState.decode("T1").team_id == "T1"


def test_update_form_state():
    state = UpdateFormState.decode(UpdateFormState("task-1", "T1").encode())
    assert state == UpdateFormState("task-1", "T1")

    # A bare task id is accepted as well
    assert UpdateFormState.decode("task-2") == UpdateFormState("task-2", None)


def test_navigation_context_back():
    assert NavigationContext(ViewMode.UPDATES, ViewMode.PERSON_TASKS, "U1").can_go_back
    assert not NavigationContext(ViewMode.UPDATES).can_go_back
    assert not NavigationContext(ViewMode.UPDATES, ViewMode.MY_TASKS).can_go_back
