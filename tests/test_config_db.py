import io

from pimsim.config_db import (
    ConfigurationData,
    ConfigurationDB,
    ParamType,
    VarType,
    get_db,
)


def _entry(name, value, param_type=ParamType.DEV_PARAM, var_type=VarType.UINT):
    return ConfigurationData(name, var_type, param_type, value)


def test_update_and_find():
    db = ConfigurationDB()
    entry = _entry("NUM_BANKS", "16")
    db.update(entry)
    assert db.find("NUM_BANKS") == entry
    assert "NUM_BANKS" in db


def test_find_missing_returns_none():
    assert ConfigurationDB().find("NUM_BANKS") is None


def test_update_replaces_existing():
    db = ConfigurationDB()
    db.update(_entry("BL", "4"))
    db.update(_entry("BL", "8"))
    assert db.find("BL").value == "8"
    assert len(db) == 1


def test_update_values_only_touches_known_keys():
    db = ConfigurationDB()
    db.update(_entry("RL", "20", var_type=VarType.UINT))
    db.update_values([("RL", "14"), ("UNKNOWN", "3")])
    assert db.find("RL") == _entry("RL", "14")
    assert db.find("UNKNOWN") is None


def test_update_values_none_is_ignored():
    db = ConfigurationDB()
    db.update(_entry("RL", "20"))
    db.update_values(None)
    assert db.find("RL").value == "20"


def test_initialize_clears_and_stops_at_unnamed_entry():
    db = ConfigurationDB()
    db.update(_entry("OLD", "1"))
    db.initialize([_entry("A", "1"), _entry("", "x"), _entry("B", "2")])
    assert db.find("OLD") is None
    assert db.find("A").value == "1"
    assert db.find("B") is None


def test_initialize_none_leaves_empty():
    db = ConfigurationDB()
    db.update(_entry("A", "1"))
    db.initialize(None)
    assert len(db) == 0


def test_clear():
    db = ConfigurationDB()
    db.update(_entry("A", "1"))
    db.clear()
    assert db.find("A") is None


def test_update_from_file(tmp_path):
    path = tmp_path / "dev.ini"
    path.write_text("NUM_ROWS = 8192 ; rows\nEXTRA=1\n", encoding="utf-8")
    db = ConfigurationDB()
    db.update(_entry("NUM_ROWS", "1024"))
    db.update_from_file(path)
    assert db.find("NUM_ROWS").value == "8192"
    assert db.find("EXTRA") is None


def test_dump_groups_by_parameter_type():
    db = ConfigurationDB()
    db.update(_entry("A", "sys1", ParamType.SYS_PARAM))
    db.update(_entry("B", "dev1", ParamType.DEV_PARAM))
    db.update(_entry("C", "sys2", ParamType.SYS_PARAM))
    out = io.StringIO()
    db.dump(out)
    assert out.getvalue() == (
        "!!SYSTEM INI PARAMETER\nsys1\nsys2\n"
        "!!DEVICE INI PARAMETER\ndev1\n"
        "!!EPOCH_DATA\n"
    )


def test_get_db_is_shared():
    entry = _entry("PIMSIM_TEST_SHARED_KEY", "42")
    get_db().update(entry)
    assert get_db().find("PIMSIM_TEST_SHARED_KEY") == entry