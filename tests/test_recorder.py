import datetime as dt

from calorimeter.recorder import DataRecorder, create_session_dir
from calorimeter.shared import FileType

DAY = dt.date(2024, 3, 5)
REG_HEADER = "Value\tavValue\tError\tPower\tP\tI\tD\r\n"


def test_session_dir_name_and_suffix(tmp_path):
    first = create_session_dir(tmp_path, DAY)
    second = create_session_dir(tmp_path, DAY)
    third = create_session_dir(tmp_path, DAY)
    assert first.name == "05_03_2024"
    assert second.name == "05_03_2024_1"
    assert third.name == f"{first.name}_2"
    assert first.parent == (tmp_path / "data").resolve()
    assert all(p.is_dir() for p in (first, second, third))


def test_session_files_created_with_headers(tmp_path):
    with DataRecorder(tmp_path, DAY) as rec:
        path = rec.path
    for name in ("regulatorFurnace.txt", "regulatorThermostat.txt",
                 "regulatorUpHeater.txt", "regulatorDownHeater.txt"):
        assert (path / name).read_text(encoding="latin-1") == REG_HEADER
    assert (path / "log.txt").read_bytes() == b""
    assert (path / "data.txt").read_bytes() == b""


def test_log_written_as_utf8(tmp_path):
    with DataRecorder(tmp_path, DAY) as rec:
        rec.write_file("Крышка\r\n", FileType.LOG)
        path = rec.path
    assert (path / "log.txt").read_text(encoding="utf-8") == "Крышка\r\n"


def test_data_and_regulator_lines_appended(tmp_path):
    with DataRecorder(tmp_path, DAY) as rec:
        rec.write_file("a\tb\r\n", FileType.DATA)
        rec.write_file("1\t2\r\n", FileType.REGULATOR_UP_HEATER)
        path = rec.path
    assert (path / "data.txt").read_text(encoding="latin-1") == "a\tb\r\n"
    assert (path / "regulatorUpHeater.txt").read_text(encoding="latin-1") == REG_HEADER + "1\t2\r\n"


def test_signal_files_only_written_while_recording(tmp_path):
    with DataRecorder(tmp_path, DAY) as rec:
        rec.write_file("ignored\r\n", FileType.MAIN_SIGNALS)
        rec.begin_record()
        rec.write_file("1.000\t2.0000\t", FileType.MAIN_SIGNALS)
        rec.write_file("x\r\n", FileType.CALIBRATION_HEATER)
        rec.end_record()
        rec.write_file("late\r\n", FileType.MAIN_SIGNALS)
        path = rec.path
    main = (path / "mainSignals_1.txt").read_text(encoding="latin-1")
    assert main == "Time(sec)\tResistance(Omh)\tSampleTemperature(mV)\r\n1.000\t2.0000\t"
    calib = (path / "calibrHeaterSignals_1.txt").read_text(encoding="latin-1")
    assert calib.endswith("x\r\n")
    thermo = (path / "thermostatSignals_1.txt").read_text(encoding="latin-1")
    assert thermo == "Time(sec)\tDiffTemperature(mV)\tThermostatTemperature(gr C)\r\n"


def test_each_record_gets_new_numbered_files(tmp_path):
    with DataRecorder(tmp_path, DAY) as rec:
        rec.begin_record()
        rec.end_record()
        rec.begin_record()
        rec.write_file("second\r\n", FileType.THERMOSTAT_SIGNALS)
        rec.end_record()
        path = rec.path
    assert (path / "thermostatSignals_2.txt").read_text(encoding="latin-1").endswith("second\r\n")
    assert not (path / "thermostatSignals_1.txt").read_text(encoding="latin-1").endswith("second\r\n")
    assert rec.recording is False


def test_writes_after_close_are_ignored(tmp_path):
    rec = DataRecorder(tmp_path, DAY)
    rec.close()
    rec.write_file("x", FileType.DATA)
    assert (rec.path / "data.txt").read_bytes() == b""