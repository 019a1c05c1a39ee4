import pytest

from fakes import FakeNotes, FakeNotifier, FakeStore


@pytest.fixture
def notes():
    return FakeNotes()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def notifier():
    return FakeNotifier()
