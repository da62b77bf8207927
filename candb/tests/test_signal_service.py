import pytest

from candb.adapters.interface import Frame
from candb.services.library import DbcLibrary
from candb.services.signal_service import SignalService

EEC1_ID = 2364539904
MSG = bytes([0x11, 0x22, 0x33, 0x44, 0x55, 0x66, 0x77, 0x88])


@pytest.fixture
def service(sample_dbc_path):
    return SignalService(DbcLibrary.from_file(sample_dbc_path))


def test_decode_frame(service):
    values = {v.signal_name: v for v in service.decode_frame(Frame(can_id=EEC1_ID, data=MSG, timestamp=1.0))}

    assert set(values) == {"Engine_Speed", "Actual_Engine_Torque", "Engine_Starter_Mode"}
    speed = values["Engine_Speed"]
    assert speed.value == 2728.5
    assert speed.unit == "rpm"
    assert speed.message_name == "EEC1"
    assert speed.timestamp == 1.0
    assert speed.raw_data == MSG
    assert values["Actual_Engine_Torque"].value == 0x33 - 125
    assert service.get_latest_signal(EEC1_ID, "Engine_Speed") == (1.0, 2728.5)


def test_decode_frame_value_labels(service):
    # Engine_Starter_Mode is bits 48..51: 0x0F -> "error"
    data = bytes([0, 0, 0, 0, 0, 0, 0x0F, 0])
    values = {v.signal_name: v for v in service.decode_frame(Frame(can_id=EEC1_ID, data=data))}
    mode = values["Engine_Starter_Mode"]
    assert mode.label == "error"
    assert str(mode) == "Engine_Starter_Mode=error"
    assert values["Engine_Speed"].label is None


def test_decode_frame_unknown_id_and_empty_payload(service):
    assert service.decode_frame(Frame(can_id=0x7FF, data=MSG)) == []
    assert service.decode_frame(Frame(can_id=EEC1_ID, data=b"")) == []
    assert service.get_latest_signal(0x7FF, "Engine_Speed") == (None, None)


def test_decode_frame_skips_incomplete_signals():
    lib = DbcLibrary.from_text("\n".join([
        'CM_ SG_ 42 Ghost "described but never defined";',
        "BO_ 42 Partial: 2 ECU",
        ' SG_ Real : 0|8@1+ (2,0) [0|510] "" ECU',
    ]))
    service = SignalService(lib)
    values = service.decode_frame(Frame(can_id=42, data=b"\x05"))
    assert [(v.signal_name, v.value) for v in values] == [("Real", 10.0)]

    service.clear_cache()
    assert service.get_latest_signal(42, "Real") == (None, None)
