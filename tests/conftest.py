"""Shared fixtures: fresh store, scripted prompter, mocked service"""

from contextlib import contextmanager
from unittest.mock import AsyncMock

import pytest

from api_client import BackendAPI
from handlers import AppContext
from models import Project, SessionStore, User, Wallet

OPERATOR_KEY = "0x" + "11" * 32
DEPLOYER = "0x" + "ab" * 20


class FakePrompter:
    """
    Answers prompts from a script, in order.

    A string answer to `select` picks the option with that label, an int
    picks by index.
    """

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []
        self.printed = []
        self.statuses = []
        self.acknowledged = 0

    def _next(self, kind, prompt):
        self.asked.append((kind, prompt))
        if not self.answers:
            raise AssertionError(f"Unexpected {kind} prompt: {prompt}")
        return self.answers.pop(0)

    async def select(self, title, options):
        answer = self._next("select", title)
        if isinstance(answer, str):
            return list(options).index(answer)
        return answer

    async def ask_text(self, prompt, default=None):
        return self._next("text", prompt)

    async def ask_int(self, prompt, default=None):
        return self._next("int", prompt)

    async def ask_decimal(self, prompt, default=None):
        return self._next("decimal", prompt)

    async def confirm(self, prompt, default=False):
        return self._next("confirm", prompt)

    async def acknowledge(self):
        self.acknowledged += 1

    @contextmanager
    def status(self, label):
        self.statuses.append(label)
        yield

    def clear(self):
        pass

    def print(self, *objects, **kwargs):
        self.printed.extend(str(obj) for obj in objects)

    def print_json(self, data):
        self.printed.append(data)


@pytest.fixture
def api():
    """Service binding with every endpoint mocked"""
    mock_api = AsyncMock(spec=BackendAPI)
    mock_api.jwt = None
    return mock_api


@pytest.fixture
def store(api):
    """Create fresh session store for each test"""
    return SessionStore(api)


@pytest.fixture
def make_ctx(store):
    def _make(*answers):
        return AppContext(store=store, prompter=FakePrompter(*answers))
    return _make


def make_user(wallet_count=5, address="0x" + "01" * 20):
    wallets = {}
    for index in range(wallet_count):
        wallet_address = "0x" + f"{index + 16:02x}" * 20
        wallets[wallet_address] = Wallet(id=index + 1, address=wallet_address, balance_wei=10 ** 17)
    return User(address=address, balance_wei=10 ** 18, wallets=wallets)


def make_project(project_id=1, name="moon"):
    return Project(id=project_id, name=name, deployer=DEPLOYER)
