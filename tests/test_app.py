import asyncio
import inspect
import logging

import pytest
from fastapi.routing import APIRoute
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from poolsite import main
from poolsite.core.config import settings
from poolsite.database import Base, engine


class UnreachableEngine:
    def connect(self):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_form_posts_run_in_the_threadpool():
    coroutine_posts = [
        route.path
        for route in main.app.routes
        if isinstance(route, APIRoute)
        and "POST" in route.methods
        and inspect.iscoroutinefunction(route.endpoint)
    ]

    assert coroutine_posts == []


def test_notification_is_sent_off_the_event_loop(client, monkeypatch):
    threads = []

    def record_notify(subject, text, reply_to=None):
        try:
            asyncio.get_running_loop()
            threads.append("event loop")
        except RuntimeError:
            threads.append("worker")
        return True

    monkeypatch.setattr("poolsite.routers.public.notify", record_notify)

    client.post(
        "/contact",
        data={"name": "Ana", "email": "ana@example.com", "message": "Quote please"},
    )

    assert threads == ["worker"]


def test_check_database_creates_tables():
    Base.metadata.drop_all(bind=engine)

    main.check_database()

    assert "sales" in sa_inspect(engine).get_table_names()


def test_check_database_raises_in_production(monkeypatch):
    monkeypatch.setattr(main, "engine", UnreachableEngine())
    monkeypatch.setattr(settings, "ENV", "production")

    with pytest.raises(SQLAlchemyError):
        main.check_database()


def test_check_database_only_logs_outside_production(monkeypatch, caplog):
    monkeypatch.setattr(main, "engine", UnreachableEngine())
    monkeypatch.setattr(settings, "ENV", "development")

    with caplog.at_level(logging.ERROR, logger="poolsite"):
        main.check_database()

    assert "Database connection check failed" in caplog.text
