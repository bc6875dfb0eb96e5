"""Pay link form: submit-time validation, state transitions and rendering."""

import pytest

from paylink.common.state_machine import FormStatus
from paylink.services.web.client import SubmissionResult
from paylink.services.web.form import FormState, PaymentForm


VALID = {"amount": "100", "currency": "USD", "email": "test@example.com"}


class RecordingAction:
    """Submit action double returning a fixed result."""

    def __init__(self, result: SubmissionResult):
        self.result = result
        self.calls = []

    async def __call__(self, prev_state, values):
        self.calls.append((prev_state, values))
        return self.result


@pytest.mark.asyncio
async def test_invalid_submit_shows_field_errors_without_calling_action():
    action = RecordingAction(SubmissionResult(success=True))
    form = PaymentForm(action, values={"amount": "-50", "currency": "USD", "email": "invalid-email"})

    state = await form.submit()

    assert action.calls == []
    assert state == FormState(status=FormStatus.IDLE)
    assert form.field_errors == {
        "amount": "Amount must be greater than 0",
        "email": "Invalid email address",
    }
    html = form.render()
    assert "Amount must be greater than 0" in html
    assert "Invalid email address" in html


@pytest.mark.asyncio
async def test_empty_submit_requires_every_field():
    action = RecordingAction(SubmissionResult(success=True))
    form = PaymentForm(action)

    await form.submit()

    assert form.field_errors == {
        "amount": "Amount is required",
        "currency": "Currency is required",
        "email": "Email is required",
    }
    assert action.calls == []


@pytest.mark.asyncio
async def test_valid_submit_delegates_and_shows_confirmation():
    action = RecordingAction(SubmissionResult(error=None, success=True))
    form = PaymentForm(action, values=VALID)

    state = await form.submit()

    assert state.status is FormStatus.SUCCESS
    assert action.calls == [(SubmissionResult(), VALID)]
    html = form.render()
    assert "Payment Successful!" in html
    assert "<form" not in html


@pytest.mark.asyncio
async def test_submit_after_success_keeps_confirmation():
    action = RecordingAction(SubmissionResult(error=None, success=True))
    form = PaymentForm(action, values=VALID)
    await form.submit()

    state = await form.submit()

    assert state.status is FormStatus.SUCCESS
    assert len(action.calls) == 1


@pytest.mark.asyncio
async def test_fixing_fields_clears_errors_on_next_submit():
    action = RecordingAction(SubmissionResult(success=True))
    form = PaymentForm(action, values={"amount": "-50", "email": "invalid-email"})
    await form.submit()

    form.change("amount", "100")
    form.change("currency", "USD")
    form.change("email", "test@example.com")
    # Edits alone do not re-validate.
    assert "amount" in form.field_errors

    await form.submit()

    assert form.field_errors == {}
    assert len(action.calls) == 1


@pytest.mark.asyncio
async def test_pending_render_disables_submit():
    form = PaymentForm()
    rendered_while_pending = []

    async def action(prev_state, values):
        rendered_while_pending.append(form.render())
        return SubmissionResult(success=True)

    form.submit_action = action
    for field, value in VALID.items():
        form.change(field, value)

    await form.submit()

    html = rendered_while_pending[0]
    assert "Processing..." in html
    assert " disabled>" in html
    assert "Pay Now" not in html


@pytest.mark.asyncio
async def test_server_error_keeps_form_and_can_be_dismissed():
    action = RecordingAction(SubmissionResult(error="Server validation error", success=False))
    form = PaymentForm(action, values=VALID)

    state = await form.submit()

    assert state == FormState(status=FormStatus.ERROR, error="Server validation error")
    html = form.render()
    assert "Server validation error" in html
    assert 'value="test@example.com"' in html
    assert "Pay Now" in html
    # Alert sits after the last field and before the submit button.
    assert html.index('id="email"') < html.index("Server validation error") < html.index("Pay Now")

    form.dismiss_error()

    assert form.state == FormState(status=FormStatus.IDLE)
    assert "Server validation error" not in form.render()


@pytest.mark.asyncio
async def test_retry_after_error_passes_previous_result():
    failed = SubmissionResult(error="Network error", success=False)
    action = RecordingAction(failed)
    form = PaymentForm(action, values=VALID)
    await form.submit()

    action.result = SubmissionResult(success=True)
    state = await form.submit()

    assert state.status is FormStatus.SUCCESS
    assert action.calls[1][0] == failed


@pytest.mark.asyncio
async def test_raising_action_becomes_generic_error():
    async def action(prev_state, values):
        raise RuntimeError("boom")

    form = PaymentForm(action, values=VALID)

    state = await form.submit()

    assert state == FormState(status=FormStatus.ERROR, error="Something went wrong")


@pytest.mark.asyncio
async def test_only_currently_invalid_inputs_are_marked():
    form = PaymentForm(RecordingAction(SubmissionResult(success=True)))
    assert "input-invalid" not in form.render()

    form.change("amount", "10")
    form.change("currency", "EUR")
    form.change("email", "bad")
    await form.submit()

    assert form.invalid_fields() == {"email"}
    assert form.render().count("input-invalid") == 1


def test_unknown_field_is_rejected():
    form = PaymentForm()

    with pytest.raises(KeyError):
        form.change("card_number", "4242")
