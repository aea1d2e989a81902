"""Unit tests for the deployment lock."""

import pytest

from webhook_deployer.core.exceptions import DeploymentAlreadyInProgressError
from webhook_deployer.core.lock import DeploymentLock


class TestDeploymentLock:
    """Tests for DeploymentLock."""

    @pytest.fixture
    def lock(self) -> DeploymentLock:
        return DeploymentLock()

    def test_acquire_and_release(self, lock: DeploymentLock):
        assert lock.locked is False
        lock.acquire()
        assert lock.locked is True
        lock.release()
        assert lock.locked is False

    def test_second_acquire_rejected(self, lock: DeploymentLock):
        lock.acquire()
        with pytest.raises(DeploymentAlreadyInProgressError):
            lock.acquire()
        assert lock.locked is True

    def test_not_reentrant(self, lock: DeploymentLock):
        with lock.held():
            with pytest.raises(DeploymentAlreadyInProgressError):
                with lock.held():
                    pass
            assert lock.locked is True
        assert lock.locked is False

    def test_release_when_free_is_noop(self, lock: DeploymentLock):
        lock.release()
        assert lock.locked is False
        lock.acquire()
        assert lock.locked is True

    def test_held_releases_on_error(self, lock: DeploymentLock):
        with pytest.raises(RuntimeError):
            with lock.held():
                raise RuntimeError("boom")
        assert lock.locked is False

    def test_instances_do_not_share_state(self):
        first, second = DeploymentLock(), DeploymentLock()
        first.acquire()
        second.acquire()
        assert first.locked and second.locked
