# tests/test_scanner_and_vision.py

import json
import wave

import httpx

from khata_pos.utils.barcode import KeyboardWedgeSource, ScanDebouncer, ScriptedBarcodeSource
from khata_pos.utils.sound import NullSoundPlayer, write_tone
from khata_pos.utils.vision import VisionClient


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


# ---------------------------- barcode sources ----------------------------

def test_debouncer_drops_repeats_inside_window():
    clock = FakeClock()
    d = ScanDebouncer(window=2.0, clock=clock)
    assert d.accept("LG-PCB-001")
    clock.now += 1.5
    assert not d.accept("LG-PCB-001")
    assert d.accept("SAM-CMP-002")
    clock.now += 0.6
    assert d.accept("LG-PCB-001")
    d.reset()
    assert d.accept("LG-PCB-001")


def test_scripted_source_replays_in_order():
    src = ScriptedBarcodeSource(["A1", "B2"])
    assert src.poll() is None  # not opened yet
    src.open()
    assert [src.poll(), src.poll(), src.poll()] == ["A1", "B2", None]

    looping = ScriptedBarcodeSource(["X"], loop=True)
    looping.open()
    assert [looping.poll(), looping.poll()] == ["X", "X"]


def test_keyboard_wedge_queues_fed_lines_while_open():
    src = KeyboardWedgeSource()
    src.feed("ignored")
    src.open()
    src.feed("  LG-PCB-001 \n")
    src.feed("")
    assert src.poll() == "LG-PCB-001"
    assert src.poll() is None
    src.feed("SAM-CMP-002")
    src.close()
    assert src.poll() is None


# ---------------------------- vision ----------------------------

def _client(handler):
    return VisionClient(url="https://vision.test/analyze", api_key="k", transport=httpx.MockTransport(handler))


def test_vision_parses_part_and_brand():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"partType": "Compressor", "brand": "Samsung", "confidence": 0.8})

    client = _client(handler)
    assert client.analyze("aGVsbG8=") == {"partType": "Compressor", "brand": "Samsung"}
    assert seen["auth"] == "Bearer k"
    assert seen["body"]["image"] == "aGVsbG8="
    client.close()


def test_vision_failures_return_none():
    assert _client(lambda r: httpx.Response(500)).analyze("x") is None
    assert _client(lambda r: httpx.Response(200, text="not json")).analyze("x") is None
    assert _client(lambda r: httpx.Response(200, json=["a"])).analyze("x") is None
    assert _client(lambda r: httpx.Response(200, json={})).analyze("x") is None


def test_vision_without_endpoint_is_unavailable():
    client = VisionClient(url="")
    assert not client.available
    assert client.analyze("x") is None


# ---------------------------- sound ----------------------------

def test_null_player_records_events():
    player = NullSoundPlayer()
    player.play("scan-success")
    player.play("delete")
    assert player.played == ["scan-success", "delete"]


def test_write_tone_produces_wav(tmp_path):
    path = tmp_path / "click.wav"
    write_tone(path, 1000.0, 1000.0, 0.03, 0.04)
    with wave.open(str(path), "rb") as w:
        assert w.getnchannels() == 1
        assert w.getframerate() == 22050
        assert w.getnframes() == int(22050 * 0.03)
