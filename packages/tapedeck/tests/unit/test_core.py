"""Unit tests — core.py (Tapedeck identity, static registration, events)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

import tapedeck
import tapedeck.core as core
from tapedeck.core import Tapedeck
from tapedeck.exceptions import (
    InvalidEventError,
    InvalidRecordingNameError,
    PersistenceError,
    PluginNotRegisteredError,
)
from tapedeck.logging import _ctx_recording_id, _ctx_recording_name
from tapedeck.plugins.base import PluginType
from tapedeck.plugins.container import PluginContainer
from tapedeck.utils.guid import guid_for_recording


@pytest.mark.unit
class TestIdentity:
    def test_id_derived_from_name(self) -> None:
        recording = Tapedeck("users/create a user")
        assert recording.recording_name == "users/create a user"
        assert recording.recording_id == guid_for_recording("users/create a user")

    def test_same_name_same_id_across_instances(self) -> None:
        assert Tapedeck("users").recording_id == Tapedeck("users").recording_id

    def test_different_names_different_ids(self) -> None:
        assert Tapedeck("users").recording_id != Tapedeck("orders").recording_id

    def test_rename_rederives_id(self, recording: Tapedeck) -> None:
        recording.recording_name = "renamed"
        assert recording.recording_id == guid_for_recording("renamed")

    def test_invalid_rename_keeps_identity(self, recording: Tapedeck) -> None:
        before = recording.recording_id
        with pytest.raises(InvalidRecordingNameError):
            recording.recording_name = ""
        assert recording.recording_name == "test recording"
        assert recording.recording_id == before

    @pytest.mark.parametrize("name", ["", "  ", None])
    def test_invalid_name_fails_construction(self, name: object) -> None:
        with pytest.raises(InvalidRecordingNameError):
            Tapedeck(name)  # type: ignore[arg-type]

    def test_version_constant(self) -> None:
        assert Tapedeck.VERSION == tapedeck.__version__

    def test_repr(self, recording: Tapedeck) -> None:
        assert repr(recording) == "<Tapedeck 'test recording' mode=replay>"


@pytest.mark.unit
class TestConstructionEvents:
    def test_register_then_create_then_configure(self, make_adapter) -> None:
        adapter_cls = make_adapter("httpx")
        seen: list[str] = []

        def on_register(container: PluginContainer) -> None:
            assert isinstance(container, PluginContainer)
            seen.append("register")
            container.register(adapter_cls)

        def on_create(recording: Tapedeck) -> None:
            seen.append("create")
            assert recording.logger.is_connected
            assert len(recording.adapters) == 0

        Tapedeck.on("register", on_register).on("create", on_create)
        recording = Tapedeck("events", {"adapters": ["httpx"]})

        assert seen == ["register", "create"]
        assert recording.adapters["httpx"].is_connected

    def test_once_listener(self) -> None:
        created: list[Tapedeck] = []
        Tapedeck.once("create", created.append)
        first = Tapedeck("first")
        Tapedeck("second")
        assert created == [first]

    def test_off_listener(self) -> None:
        created: list[Tapedeck] = []
        Tapedeck.on("create", created.append)
        Tapedeck.off("create", created.append)
        Tapedeck("quiet")
        assert created == []

    def test_unknown_event(self) -> None:
        with pytest.raises(InvalidEventError):
            Tapedeck.on("destroy", print)


@pytest.mark.unit
class TestStaticRegistration:
    def test_register_makes_factory_available(self, make_adapter) -> None:
        adapter_cls = make_adapter("httpx")
        assert Tapedeck.register(adapter_cls) is Tapedeck
        recording = Tapedeck("registered")
        assert recording.container.lookup(PluginType.ADAPTER, "httpx") is adapter_cls
        assert isinstance(recording.connect_to("httpx"), adapter_cls)

    def test_register_persister_by_name_in_config(self, make_persister) -> None:
        persister_cls = make_persister("fs")
        Tapedeck.register(persister_cls)
        recording = Tapedeck("persisted", {"persister": "fs"})
        assert isinstance(recording.persister, persister_cls)

    def test_unregister_affects_only_later_instances(self, make_adapter) -> None:
        adapter_cls = make_adapter("httpx")
        Tapedeck.register(adapter_cls)
        before = Tapedeck("before")
        Tapedeck.unregister(adapter_cls)
        after = Tapedeck("after")

        assert before.container.has(PluginType.ADAPTER, "httpx")
        assert not after.container.has(PluginType.ADAPTER, "httpx")
        with pytest.raises(PluginNotRegisteredError):
            after.connect_to("httpx")

    def test_callback_memoised_per_factory(self, make_adapter) -> None:
        adapter_cls = make_adapter("httpx")
        Tapedeck.register(adapter_cls)
        callback = core._FACTORY_REGISTRATION[adapter_cls]
        Tapedeck.register(adapter_cls)
        assert core._FACTORY_REGISTRATION[adapter_cls] is callback
        assert core._EVENTS.listeners("register").count(callback) == 2

    def test_repeat_register_needs_repeat_unregister(self, make_adapter) -> None:
        adapter_cls = make_adapter("httpx")
        Tapedeck.register(adapter_cls).register(adapter_cls)
        Tapedeck.unregister(adapter_cls)
        assert Tapedeck("still").container.has(PluginType.ADAPTER, "httpx")
        assert adapter_cls in core._FACTORY_REGISTRATION

        Tapedeck.unregister(adapter_cls)
        assert not Tapedeck("gone").container.has(PluginType.ADAPTER, "httpx")
        assert adapter_cls not in core._FACTORY_REGISTRATION

    def test_unregister_unknown_factory_is_noop(self, make_adapter) -> None:
        assert Tapedeck.unregister(make_adapter("never")) is Tapedeck

    def test_register_rejects_non_plugin(self) -> None:
        with pytest.raises(TypeError):
            Tapedeck.register(object)  # type: ignore[arg-type]
        assert object not in core._FACTORY_REGISTRATION


@pytest.mark.unit
class TestRequestLogging:
    def test_logs_only_when_enabled(self) -> None:
        recording = Tapedeck("logged", {"logging": True})
        with patch("tapedeck.request_logger.log") as log:
            recording.register_request({"method": "GET", "url": "http://example.test"})
        log.info.assert_called_once()
        assert log.info.call_args.args == ("request_observed",)
        assert log.info.call_args.kwargs["method"] == "GET"
        assert log.info.call_args.kwargs["mode"] == "replay"

    def test_silent_by_default(self, recording: Tapedeck) -> None:
        with patch("tapedeck.request_logger.log") as log:
            recording.register_request({"method": "GET"})
        log.info.assert_not_called()

    async def test_silent_after_stop(self) -> None:
        recording = Tapedeck("logged", {"logging": True})
        await recording.stop()
        assert not recording.logger.is_connected
        with patch("tapedeck.request_logger.log") as log:
            recording.register_request({"method": "GET"})
        log.info.assert_not_called()


@pytest.mark.unit
class TestLogContext:
    async def test_bound_inside_async_with(self) -> None:
        async with Tapedeck("outer") as recording:
            assert _ctx_recording_id.get() == recording.recording_id
            assert _ctx_recording_name.get() == "outer"
        assert _ctx_recording_id.get() is None
        assert _ctx_recording_name.get() is None

    async def test_nested_recordings_restore_outer_context(self) -> None:
        async with Tapedeck("outer") as outer:
            async with Tapedeck("inner") as inner:
                assert _ctx_recording_id.get() == inner.recording_id
            assert _ctx_recording_id.get() == outer.recording_id
            assert _ctx_recording_name.get() == "outer"
        assert _ctx_recording_id.get() is None

    async def test_context_restored_when_stop_fails(self, make_persister) -> None:
        broken = make_persister("fs", error=OSError("disk full"))
        async with Tapedeck("outer") as outer:
            with pytest.raises(PersistenceError):
                async with Tapedeck("inner", {"persister": broken}):
                    pass
            assert _ctx_recording_id.get() == outer.recording_id
