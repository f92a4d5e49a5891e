"""EventBusのテスト"""

import pytest

from stream_segmenter.domain import EventBus, PipelineEvent


@pytest.fixture
def bus() -> EventBus:
    """パイプラインイベントに限定したEventBus"""
    return EventBus(PipelineEvent)


class TestEmit:
    """emitの配信テスト"""

    def test_delivers_payload_to_handler(self, bus: EventBus) -> None:
        """登録済みハンドラにペイロードが渡される"""
        received: list[object] = []
        bus.on(PipelineEvent.VAD, received.append)

        bus.emit(PipelineEvent.VAD, "payload")

        assert received == ["payload"]

    def test_delivers_to_every_handler_once(self, bus: EventBus) -> None:
        """全ハンドラがちょうど1回ずつ呼ばれる"""
        first: list[int] = []
        second: list[int] = []
        bus.on(PipelineEvent.METER, first.append)
        bus.on(PipelineEvent.METER, second.append)

        bus.emit(PipelineEvent.METER, 1)

        assert first == [1]
        assert second == [1]

    def test_emit_without_handlers_is_noop(self, bus: EventBus) -> None:
        """ハンドラ未登録のイベントは何もしない"""
        bus.emit(PipelineEvent.SEGMENT, object())

    def test_other_events_are_not_delivered(self, bus: EventBus) -> None:
        """別名のイベントは届かない"""
        received: list[object] = []
        bus.on(PipelineEvent.SPEECH_START, received.append)

        bus.emit(PipelineEvent.SPEECH_END, "end")

        assert received == []

    def test_string_name_matches_enum(self, bus: EventBus) -> None:
        """文字列のイベント名でも同じイベントとして扱う"""
        received: list[object] = []
        bus.on("speechStart", received.append)

        bus.emit(PipelineEvent.SPEECH_START, "start")

        assert received == ["start"]

    def test_handler_exception_propagates(self, bus: EventBus) -> None:
        """ハンドラの例外は呼び出し元へ伝播する"""

        def failing(_payload: object) -> None:
            raise RuntimeError("boom")

        bus.on(PipelineEvent.ERROR, failing)

        with pytest.raises(RuntimeError, match="boom"):
            bus.emit(PipelineEvent.ERROR, None)

    def test_unknown_event_rejected(self, bus: EventBus) -> None:
        """許可されていないイベント名はValueError"""
        with pytest.raises(ValueError):
            bus.on("transcript", print)
        with pytest.raises(ValueError):
            bus.emit("transcript", None)

    def test_unrestricted_bus_accepts_any_name(self) -> None:
        """names未指定なら任意の名前を扱える"""
        bus = EventBus()
        received: list[object] = []
        bus.on("custom", received.append)

        bus.emit("custom", 42)

        assert received == [42]


class TestSubscription:
    """購読・解除のテスト"""

    def test_unsubscribe_stops_delivery(self, bus: EventBus) -> None:
        """解除後は呼ばれない"""
        received: list[object] = []
        unsubscribe = bus.on(PipelineEvent.VAD, received.append)

        unsubscribe()
        bus.emit(PipelineEvent.VAD, "after")

        assert received == []
        assert bus.handler_count(PipelineEvent.VAD) == 0

    def test_unsubscribe_is_idempotent(self, bus: EventBus) -> None:
        """解除関数は複数回呼んでも安全"""
        unsubscribe = bus.on(PipelineEvent.VAD, lambda _payload: None)

        unsubscribe()
        unsubscribe()

        assert bus.handler_count(PipelineEvent.VAD) == 0

    def test_duplicate_registration_is_single_handler(self, bus: EventBus) -> None:
        """同じハンドラの重複登録は1つとして扱う"""
        received: list[object] = []
        bus.on(PipelineEvent.VAD, received.append)
        bus.on(PipelineEvent.VAD, received.append)

        bus.emit(PipelineEvent.VAD, "once")

        assert received == ["once"]
        assert bus.handler_count(PipelineEvent.VAD) == 1

    def test_handler_can_unsubscribe_itself(self, bus: EventBus) -> None:
        """配信中のハンドラが自身を解除しても他の配信は続く"""
        received: list[str] = []
        unsubscribe_holder: list = []

        def once(payload: str) -> None:
            received.append(f"once:{payload}")
            unsubscribe_holder[0]()

        unsubscribe_holder.append(bus.on(PipelineEvent.METER, once))
        bus.on(PipelineEvent.METER, lambda payload: received.append(f"always:{payload}"))

        bus.emit(PipelineEvent.METER, "a")
        bus.emit(PipelineEvent.METER, "b")

        assert sorted(received) == ["always:a", "always:b", "once:a"]

    def test_clear_removes_all_handlers(self, bus: EventBus) -> None:
        """clearで全購読が解除される"""
        received: list[object] = []
        bus.on(PipelineEvent.VAD, received.append)
        bus.on(PipelineEvent.METER, received.append)

        bus.clear()
        bus.emit(PipelineEvent.VAD, 1)
        bus.emit(PipelineEvent.METER, 2)

        assert received == []

    def test_buses_are_independent(self) -> None:
        """別インスタンスのバス同士は干渉しない"""
        first = EventBus(PipelineEvent)
        second = EventBus(PipelineEvent)
        received: list[object] = []
        first.on(PipelineEvent.VAD, received.append)

        second.emit(PipelineEvent.VAD, "other")

        assert received == []
