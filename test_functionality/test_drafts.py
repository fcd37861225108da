import pytest

from application.context import CallerContext, resolve_identity
from application.drafts import DraftStore, is_affirmative
from domain.exceptions import ConfigurationError
from domain.models import ActionFamily


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.parametrize("reply", ["yes", "Yes, send it", "confirmed", "go ahead", "sure!"])
def test_affirmative_replies(reply):
    assert is_affirmative(reply)


@pytest.mark.parametrize("reply", [None, "", "   ", "no", "No.", "nope", "cancel", "no, change it", "don't send"])
def test_non_affirmative_replies(reply):
    assert not is_affirmative(reply)


def test_draft_expires_after_ttl():
    clock = Clock()
    store = DraftStore(ttl_seconds=60, clock=clock)
    store.put(ActionFamily.SLACK_MESSAGE, "Message: hi")
    clock.now += 59
    assert ActionFamily.SLACK_MESSAGE in store
    clock.now += 1
    assert store.get(ActionFamily.SLACK_MESSAGE) is None
    assert len(store) == 0


def test_redraft_replaces_and_consume_removes():
    store = DraftStore()
    store.put(ActionFamily.ASANA_TASK, "first", {"taskName": "a"})
    store.put(ActionFamily.ASANA_TASK, "second", {"taskName": "b"})
    record = store.consume(ActionFamily.ASANA_TASK)
    assert record.content == "second"
    assert record.arguments == {"taskName": "b"}
    assert store.consume(ActionFamily.ASANA_TASK) is None


def test_families_are_independent():
    store = DraftStore()
    store.put(ActionFamily.SALESFORCE_CONTACT, "contact")
    assert ActionFamily.SALESFORCE_OPPORTUNITY not in store
    store.discard(ActionFamily.SALESFORCE_CONTACT)
    assert len(store) == 0


def test_identity_provider_called_once():
    calls = []

    def provider():
        calls.append(1)
        return "  alice "

    caller = CallerContext.from_identity(provider)
    assert caller.user_id == "alice"
    assert len(calls) == 1


@pytest.mark.parametrize("identity", ["", "   ", lambda: ""])
def test_empty_identity_rejected(identity):
    with pytest.raises(ConfigurationError):
        resolve_identity(identity)
