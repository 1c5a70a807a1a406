"""Shared fixtures: a storage file per test and executors that run on demand."""

from concurrent.futures import Future

import pytest

from composer import Composer
from persistence import PersistenceGateway


class SyncExecutor:
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class ManualExecutor:
    """Holds submitted work until the test finishes it."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        future.set_running_or_notify_cancel()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def finish_all(self):
        for future, fn, args, kwargs in self.jobs:
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)
        self.jobs = []


def improved(text):
    return f"Improved: {text}"


@pytest.fixture
def gateway(tmp_path):
    return PersistenceGateway(tmp_path / "storage.json", key="cvData")


@pytest.fixture
def composer(gateway):
    return Composer(gateway=gateway, style_id="professional",
                    improve=improved, executor=SyncExecutor())


@pytest.fixture
def manual_executor():
    return ManualExecutor()
