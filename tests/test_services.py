"""
Tests for the service facade (ecopulse.services.EcoPulseService).
"""
from datetime import date

import pytest

from ecopulse.config import AppConfig
from ecopulse.db import StorageError
from ecopulse.models import Category
from ecopulse.services import EcoPulseService
from ecopulse.validation import ValidationError


def test_flight_lunch_scenario(service, fixed_datetime):
    service.add_activity("Flight", Category.TRANSPORT, 12.5)
    service.add_activity("Lunch", Category.FOOD, 3.2)

    listed = service.list_activities()
    assert [a.name for a in listed] == ["Lunch", "Flight"]

    series = service.get_series()
    assert [(p.day, p.category, p.total_impact) for p in series] == [
        (fixed_datetime.date(), Category.TRANSPORT, 12.5),
        (fixed_datetime.date(), Category.FOOD, 3.2),
    ]

    flight = next(a for a in listed if a.name == "Flight")
    service.delete_activity(flight.activity_id)
    assert [a.name for a in service.list_activities()] == ["Lunch"]

    service.clear_all()
    assert service.list_activities() == []
    assert service.get_series() == []


def test_empty_name_is_rejected(service):
    with pytest.raises(ValidationError):
        service.add_activity("", Category.FOOD, 3.2)
    assert service.list_activities() == []


def test_category_may_be_given_as_text(service):
    stored = service.add_activity("Shower", "Home", 0.8)
    assert stored.category is Category.HOME


class TestDeleteAt:

    def test_resolves_index_against_live_view(self, service):
        service.add_activity("Flight", Category.TRANSPORT, 12.5)
        service.add_activity("Lunch", Category.FOOD, 3.2)
        service.add_activity("Heating", Category.HOME, 7.0)

        # view: Heating, Lunch, Flight
        deleted = service.delete_activity_at(1)

        assert deleted.name == "Lunch"
        assert [a.name for a in service.list_activities()] == ["Heating", "Flight"]

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_stale_index_is_noop(self, service, index):
        service.add_activity("Flight", Category.TRANSPORT, 12.5)

        assert service.delete_activity_at(index) is None
        assert len(service.list_activities()) == 1

    def test_multiple_indices_use_same_view(self, service):
        for name in ("a", "b", "c", "d"):
            service.add_activity(name, Category.ENERGY, 1.0)

        # view: d, c, b, a
        deleted = service.delete_activities_at([0, 2, 2, 9])

        assert [a.name for a in deleted] == ["d", "b"]
        assert [a.name for a in service.list_activities()] == ["c", "a"]


def test_subscription_through_service(service):
    deliveries = []
    sub = service.subscribe(lambda records: deliveries.append(len(records)))

    service.add_activity("Flight", Category.TRANSPORT, 12.5)
    service.unsubscribe(sub)
    service.add_activity("Lunch", Category.FOOD, 3.2)

    assert deliveries == [0, 1]


def test_series_from_delivered_records(service, fixed_datetime):
    service.add_activity("Flight", Category.TRANSPORT, 12.5)
    records = service.list_activities()

    series = service.get_series(records)

    assert series[0].day == fixed_datetime.date()
    assert service.get_series([]) == []


def test_clear_all_surfaces_storage_error(service, db):
    service.add_activity("Flight", Category.TRANSPORT, 12.5)
    db.close()
    with pytest.raises(StorageError):
        service.clear_all()


class TestBootstrap:

    def test_records_survive_restart(self, db_path):
        svc = EcoPulseService.bootstrap(db_path=str(db_path))
        stored = svc.add_activity("Flight", Category.TRANSPORT, 12.5)
        svc.close()

        reopened = EcoPulseService.bootstrap(db_path=str(db_path))
        try:
            listed = reopened.list_activities()
            assert [a.activity_id for a in listed] == [stored.activity_id]
            assert listed[0].created_at == stored.created_at
            assert listed[0].carbon_impact == 12.5
        finally:
            reopened.close()

    def test_reset_db_drops_records(self, db_path):
        svc = EcoPulseService.bootstrap(db_path=str(db_path))
        svc.add_activity("Flight", Category.TRANSPORT, 12.5)
        svc.close()

        fresh = EcoPulseService.bootstrap(config=AppConfig(db_path=str(db_path), reset_db=True))
        try:
            assert fresh.list_activities() == []
        finally:
            fresh.close()

    def test_series_uses_configured_time_zone(self, db_path):
        svc = EcoPulseService.bootstrap(db_path=str(db_path))
        try:
            svc.add_activity("Flight", Category.TRANSPORT, 12.5)
            series = svc.get_series()
            assert len(series) == 1
            assert isinstance(series[0].day, date)
        finally:
            svc.close()

    def test_closed_service_rejects_writes(self, db_path):
        svc = EcoPulseService.bootstrap(db_path=str(db_path))
        svc.close()
        with pytest.raises(StorageError):
            svc.add_activity("Flight", Category.TRANSPORT, 12.5)
