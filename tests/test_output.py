import io

import pytest

from pimsim.config_db import ConfigurationDB, ParamType, VarType
from pimsim.output import Color, OutputSettings
from pimsim.system_config import set_config_param


def test_color_lookup_by_ansi_sequence():
    assert Color("\x1b[31m") is Color.RED
    assert Color("\x1b[0m") is Color.END


def test_emit_hidden_when_output_disabled():
    out = io.StringIO()
    settings = OutputSettings(show_sim_output=False, stdout=out)
    settings.emit("hello")
    assert out.getvalue() == ""


def test_emit_writes_line_to_stdout_stream():
    out = io.StringIO()
    settings = OutputSettings(show_sim_output=True, stdout=out)
    settings.emit("hello", Color.GREEN)
    assert out.getvalue() == "hello\n"


def test_emit_without_newline():
    out = io.StringIO()
    settings = OutputSettings(show_sim_output=True, stdout=out)
    settings.emit("a", newline=False)
    settings.emit("b", newline=False)
    assert out.getvalue() == "ab"


def test_emit_goes_to_log_when_log_output_set():
    out = io.StringIO()
    log = io.StringIO()
    settings = OutputSettings(show_sim_output=True, log_output=True, log=log, stdout=out)
    settings.emit("traced")
    assert log.getvalue() == "traced\n"
    assert out.getvalue() == ""


def test_emit_log_output_without_log_stream_raises():
    settings = OutputSettings(show_sim_output=True, log_output=True)
    with pytest.raises(ValueError):
        settings.emit("x")


def test_emit_if_respects_condition():
    out = io.StringIO()
    settings = OutputSettings(show_sim_output=True, stdout=out)
    settings.emit_if(False, "no")
    settings.emit_if(True, "yes")
    assert out.getvalue() == "yes\n"


def test_emit_if_hidden_when_output_disabled():
    out = io.StringIO()
    settings = OutputSettings(show_sim_output=False, stdout=out)
    settings.emit_if(True, "yes")
    assert out.getvalue() == ""


def test_from_db_reads_flags():
    db = ConfigurationDB()
    set_config_param(VarType.BOOL, "SHOW_SIM_OUTPUT", True, ParamType.SYS_PARAM, db)
    set_config_param(VarType.BOOL, "DEBUG_CMD_TRACE", True, ParamType.SYS_PARAM, db)
    set_config_param(VarType.BOOL, "LOG_OUTPUT", False, ParamType.SYS_PARAM, db)
    set_config_param(VarType.STRING, "SIM_TRACE_FILE", "trace.txt", ParamType.SYS_PARAM, db)
    settings = OutputSettings.from_db(db)
    assert settings.show_sim_output is True
    assert settings.debug_cmd_trace is True
    assert settings.log_output is False
    assert settings.debug_bus is False
    assert settings.sim_trace_file == "trace.txt"


def test_from_db_then_assign_stream():
    db = ConfigurationDB()
    set_config_param(VarType.BOOL, "SHOW_SIM_OUTPUT", True, ParamType.SYS_PARAM, db)
    settings = OutputSettings.from_db(db)
    out = io.StringIO()
    settings.stdout = out
    settings.emit("line")
    assert out.getvalue() == "line\n"


def test_from_db_empty_store_gives_defaults():
    settings = OutputSettings.from_db(ConfigurationDB())
    assert settings == OutputSettings()