import json

import pytest

from candb import metrics
from candb.config import ConfigManager, LoaderSettings
from candb.exceptions import (
    ConfigurationError, DbcReadError, MissingContextError, SignalLayoutMissingError,
    UnsupportedEntryError,
)
from candb.models.entry import (
    BusConfiguration, EntryKind, FrameAttribute, FrameDefinition, FrameDescription,
    SignalAttribute, SignalDefinition, SignalDescription, SignalValueTable, Unknown, Version,
)
from candb.models.frame import DbcFrame
from candb.services.library import DbcLibrary

EEC1_ID = 2364539904


def _signal_def(name="Engine_Speed", start_bit=24, bit_length=16):
    return SignalDefinition(
        name=name, start_bit=start_bit, bit_length=bit_length, little_endian=True,
        signed=False, scale=0.125, offset=0.0, min=0.0, max=8031.88, unit="rpm",
        receivers="Vector__XXX",
    )


def test_default_library_is_empty():
    lib = DbcLibrary()
    assert len(lib) == 0
    assert lib.is_empty()
    assert lib.last_frame_id is None
    assert lib.get_frame(EEC1_ID) is None
    assert lib.get_signal("Engine_Speed") is None


def test_signal_definition_attaches_to_last_frame():
    lib = DbcLibrary()
    lib.add_entry(FrameDefinition(id=EEC1_ID, name="EEC1", length=8, sender="Vector__XXX"))
    lib.add_entry(_signal_def())

    frame = lib.get_frame(EEC1_ID)
    assert frame.name == "EEC1"
    assert frame.length == 8
    assert frame.sender == "Vector__XXX"
    assert frame.get_signal("Engine_Speed").get_definition().start_bit == 24
    assert lib.last_frame_id == EEC1_ID


def test_signal_definition_without_frame_fails():
    lib = DbcLibrary()
    with pytest.raises(MissingContextError) as excinfo:
        lib.add_entry(_signal_def())
    assert excinfo.value.entry_kind is EntryKind.SIGNAL_DEFINITION
    assert lib.is_empty()


@pytest.mark.parametrize("entry", [
    Version(text="Don't care about version entry"),
    BusConfiguration(speed=500.0),
    Unknown(raw_text="BU_: ECU"),
])
def test_unsupported_entry(entry):
    lib = DbcLibrary()
    with pytest.raises(UnsupportedEntryError) as excinfo:
        lib.add_entry(entry)
    assert excinfo.value.entry_kind is entry.kind
    assert lib.is_empty()
    assert lib.last_frame_id is None


def test_merge_keeps_fields_not_carried_by_entry():
    lib = DbcLibrary()
    lib.add_entry(FrameDescription(id=100, text="Described first"))
    frame = lib.get_frame(100)
    assert frame.id == 100
    assert frame.name == ""
    assert frame.length == 0

    lib.add_entry(FrameDefinition(id=100, name="Late", length=4, sender="ECU"))
    lib.add_entry(FrameAttribute(id=100, key="GenMsgCycleTime", value="10"))
    assert lib.get_frame(100) is frame
    assert frame.description == "Described first"
    assert frame.name == "Late"
    assert frame.get_attribute("GenMsgCycleTime") == "10"
    assert frame.get_attribute("Missing") is None


def test_attribute_overwrite():
    lib = DbcLibrary()
    lib.add_entry(FrameAttribute(id=1, key="K", value="a"))
    lib.add_entry(FrameAttribute(id=1, key="K", value="b"))
    assert lib.get_frame(1).attributes == {"K": "b"}


def test_signal_entries_before_definition_build_incomplete_signal():
    lib = DbcLibrary()
    lib.add_entry(SignalDescription(id=EEC1_ID, signal_name="Engine_Speed", text="Speed"))
    lib.add_entry(SignalAttribute(id=EEC1_ID, signal_name="Engine_Speed", key="SPN", value="190"))

    signal = lib.get_signal("Engine_Speed")
    assert signal.description == "Speed"
    assert signal.get_attribute("SPN") == "190"
    assert not signal.has_definition
    with pytest.raises(SignalLayoutMissingError):
        signal.get_definition()
    with pytest.raises(SignalLayoutMissingError):
        signal.decode(b"\x00" * 8)

    # the description touched the frame, so the definition lands in it
    lib.add_entry(_signal_def())
    assert lib.get_signal("Engine_Speed") is signal
    assert signal.get_definition().bit_length == 16
    assert signal.description == "Speed"


def test_last_frame_id_follows_signal_only_entries():
    lib = DbcLibrary()
    lib.add_entry(FrameDefinition(id=1, name="A", length=8, sender="ECU"))
    lib.add_entry(SignalDescription(id=2, signal_name="Other", text="text"))
    assert lib.last_frame_id == 2

    lib.add_entry(_signal_def(name="Follower"))
    assert lib.get_frame(2).get_signal("Follower") is not None
    assert lib.get_frame(1).get_signal("Follower") is None


def test_value_table_merges_into_signal():
    lib = DbcLibrary()
    lib.add_entry(FrameDefinition(id=5, name="F", length=8, sender="ECU"))
    lib.add_entry(_signal_def(name="Mode", start_bit=0, bit_length=4))
    lib.add_entry(SignalValueTable(id=5, signal_name="Mode", values=((0, "off"), (1, "on"))))
    signal = lib.get_signal("Mode")
    assert signal.value_label(1) == "on"
    assert signal.value_label(7) is None


def test_prebuilt_mapping():
    frame = DbcFrame(7, name="Prebuilt", length=2, sender="ECU")
    lib = DbcLibrary({7: frame})
    assert len(lib) == 1
    assert lib.get_frame(7) is frame
    assert 7 in lib
    assert lib.last_frame_id is None


def test_from_file(sample_dbc_path, engine_speed_layout):
    lib = DbcLibrary.from_file(sample_dbc_path)
    assert len(lib) == 3
    assert sorted(lib.get_frame_ids()) == [256, 1297, EEC1_ID]

    frame = lib.get_frame(EEC1_ID)
    assert frame.get_name() == "EEC1"
    assert frame.get_length() == 8
    assert frame.get_sender() == "Vector__XXX"
    assert frame.get_description() == "Electronic Engine Controller 1"
    assert frame.get_attribute("VFrameFormat") == "3"
    assert frame.get_signal("Engine_Speed").get_definition() == engine_speed_layout
    assert lib.get_frame(256).get_attribute("GenMsgCycleTime") == "100"
    assert len(lib.get_frame(1297).get_signals()) == 3


def test_from_file_long_names(sample_dbc_path):
    lib = DbcLibrary.from_file(sample_dbc_path)
    signal = lib.get_frame(1297).get_signal("FSG_DV_EBS_Brake_pressure_s_0000")
    assert signal.get_attribute("SystemSignalLongSymbol") == "FSG_DV_EBS_Brake_pressure_sensor_rear"
    assert signal.long_name == "FSG_DV_EBS_Brake_pressure_sensor_rear"
    assert lib.get_signal("Engine_Speed").long_name == "Engine_Speed"


def test_from_file_records_metrics(sample_dbc_path):
    DbcLibrary.from_file(sample_dbc_path)
    counters = metrics.get_all()
    assert counters["dbc_entries_added"] > 0
    # VERSION and BS_ are tokenized but rejected by the merge engine
    assert counters["dbc_entries_rejected"] == 2
    assert counters["dbc_lines_skipped"] > 0


def test_designated_attribute_views(sample_dbc_path):
    lib = DbcLibrary.from_file(sample_dbc_path)
    assert lib.get_frame(EEC1_ID).signal_attribute_view("SPN") == {
        "Engine_Speed": "190",
        "Actual_Engine_Torque": "513",
    }
    assert lib.get_signal_by_attribute("SPN", "513").name == "Actual_Engine_Torque"
    assert lib.get_signal_by_attribute("SPN", "1") is None


def test_from_file_missing():
    with pytest.raises(FileNotFoundError):
        DbcLibrary.from_file("./candb/tests/data/sample.dbc.fail")


def test_from_file_latin1(latin1_dbc_path):
    lib = DbcLibrary.from_file(latin1_dbc_path)
    signal = lib.get_signal("Cabin_Temp")
    assert signal.get_definition().unit == "°C"
    assert signal.description.endswith("°C")


def test_from_file_strict_utf8_surfaces_as_os_error(latin1_dbc_path):
    settings = LoaderSettings(encoding="utf-8", decode_errors="strict")
    with pytest.raises(OSError) as excinfo:
        DbcLibrary.from_file(latin1_dbc_path, settings)
    assert isinstance(excinfo.value, DbcReadError)
    assert excinfo.value.encoding == "utf-8"


def test_from_file_unknown_encoding(latin1_dbc_path):
    with pytest.raises(DbcReadError):
        DbcLibrary.from_file(latin1_dbc_path, LoaderSettings(encoding="no-such-codec"))


def test_from_text_skips_signal_before_frame():
    source = "\n".join([
        ' SG_ Orphan : 0|8@1+ (1,0) [0|255] "" ECU',
        "BO_ 10 First: 8 ECU",
        ' SG_ Kept : 0|8@1+ (1,0) [0|255] "" ECU',
    ])
    lib = DbcLibrary.from_text(source)
    assert lib.get_signal("Orphan") is None
    assert lib.get_signal("Kept") is not None
    assert metrics.get("dbc_entries_rejected") == 1


def test_from_file_keeps_nel_inside_comments(latin1_dbc_path):
    # 0x85 is U+0085 in ISO-8859-1, which str.splitlines() would treat as a line break
    lib = DbcLibrary.from_file(latin1_dbc_path)
    assert lib.get_frame(300).get_description() == "Innenraum\x85 Sensoren"


def test_from_text_line_endings():
    source = "BO_ 10 S: 8 ECU\r\nCM_ SG_ 10 S \"wait\x85 done here\";\r\n"
    lib = DbcLibrary.from_text(source)
    assert lib.get_signal("S").description == "wait\x85 done here"
    assert lib.get_frame(10).get_name() == "S"


def test_designated_attribute_from_settings(sample_dbc_path):
    lib = DbcLibrary.from_file(sample_dbc_path, LoaderSettings(designated_attribute="SystemSignalLongSymbol"))
    assert lib.signal_attribute_view(1297) == {
        "FSG_DV_EBS_Brake_pressure_s_0000": "FSG_DV_EBS_Brake_pressure_sensor_rear",
    }
    assert lib.signal_attribute_view(EEC1_ID, "SPN")["Engine_Speed"] == "190"
    assert lib.signal_attribute_view(0x7FF) == {}
    assert lib.get_signal_by_designated_attribute("FSG_DV_EBS_Brake_pressure_sensor_rear").name == \
        "FSG_DV_EBS_Brake_pressure_s_0000"

    default = DbcLibrary.from_file(sample_dbc_path)
    assert default.signal_attribute_view(EEC1_ID) == default.get_frame(EEC1_ID).signal_attribute_view()
    assert default.get_signal_by_designated_attribute("190").name == "Engine_Speed"


def test_from_config(sample_dbc_path, latin1_dbc_path, tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("CANDB_ENCODING", raising=False)
    monkeypatch.delenv("CANDB_DESIGNATED_ATTRIBUTE", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"loader_settings": {"designated_attribute": "VFrameFormat"}}),
                           encoding="utf-8")

    lib = DbcLibrary.from_config(sample_dbc_path, ConfigManager(str(config_path)))
    assert lib.settings.designated_attribute == "VFrameFormat"
    assert len(lib) == 3

    # no explicit config: environment and defaults apply
    monkeypatch.setenv("CANDB_ENCODING", "utf-8")
    assert DbcLibrary.from_config(latin1_dbc_path).get_signal("Cabin_Temp").get_definition().unit == "\ufffdC"

    bad = ConfigManager(str(config_path))
    bad.loader_settings.encoding = "no-such-codec"
    with pytest.raises(ConfigurationError):
        DbcLibrary.from_config(sample_dbc_path, bad)
