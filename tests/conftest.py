import pytest

from expense_tracker.core.limiter import limiter


class FakeAIClient:
    """Stands in for GenerativeAIClient; replies from a canned queue."""

    def __init__(self, replies=None, available=True):
        self.replies = list(replies or [])
        self.available = available
        self.prompts = []

    def is_available(self):
        return self.available

    def generate(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_ai():
    def build(*replies, available=True):
        return FakeAIClient(replies, available=available)
    return build


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()
