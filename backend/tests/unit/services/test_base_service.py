"""Tests for BaseService transaction handling and metrics."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from trialdesk.core.exceptions import NotFoundException, RepositoryException, ServiceException
from trialdesk.services.base import BaseService


class _Probe(BaseService):
    @BaseService.measure_operation("probe")
    def run(self, error=None):
        with self.transaction():
            if error is not None:
                raise error
        return "ok"


@pytest.fixture
def probe():
    service = _Probe(MagicMock())
    service.reset_metrics()
    return service


def test_commit_on_success(probe) -> None:
    assert probe.run() == "ok"
    probe.db.commit.assert_called_once()
    probe.db.rollback.assert_not_called()


@pytest.mark.parametrize(
    "error",
    [RepositoryException("boom"), OperationalError("SELECT 1", {}, Exception("gone"))],
)
def test_data_errors_become_service_exception(probe, error) -> None:
    with pytest.raises(ServiceException):
        probe.run(error)
    probe.db.rollback.assert_called_once()
    probe.db.commit.assert_not_called()


def test_domain_errors_propagate_unchanged(probe) -> None:
    with pytest.raises(NotFoundException):
        probe.run(NotFoundException("nope"))
    probe.db.rollback.assert_called_once()


def test_metrics_track_success_and_failure(probe) -> None:
    probe.run()
    with pytest.raises(NotFoundException):
        probe.run(NotFoundException("nope"))

    metrics = probe.get_metrics()["probe"]
    assert metrics["count"] == 2
    assert metrics["failure_count"] == 1
    assert metrics["success_rate"] == 0.5
