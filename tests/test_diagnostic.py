import threading

from calorimeter.diagnostic import Diagnostic, Pressure, ThermocoupleStatus
from calorimeter.shared import MessageLevel


def _recorder(signal):
    calls = []
    signal.connect(lambda *a: calls.append(a))
    return calls


def test_first_value_reports_ok_when_enabled():
    diag = Diagnostic()
    diag.start_emit_alarm_signals()
    control = _recorder(diag.control_thermocouple)
    diag.diagnostic_thermocouple(10.0)
    assert control == [(False,)]


def test_first_value_silent_when_disabled():
    diag = Diagnostic()
    control = _recorder(diag.control_thermocouple)
    diag.diagnostic_thermocouple(10.0)
    assert control == []


def test_breakage_and_recovery():
    diag = Diagnostic()
    diag.start_emit_alarm_signals()
    diag.diagnostic_thermocouple(10.0)
    control = _recorder(diag.control_thermocouple)
    messages = _recorder(diag.message)

    diag.diagnostic_thermocouple(30.0)
    assert diag.thermocouple_status is ThermocoupleStatus.BREAKAGE
    assert control == []

    diag.diagnostic_thermocouple(11.0)
    assert diag.thermocouple_status is ThermocoupleStatus.NORMAL
    assert control == [(False,)]
    assert messages == [("Диагностика: Термопара в норме.", MessageLevel.INFORMATION)]


def test_small_changes_keep_normal_without_messages():
    diag = Diagnostic()
    diag.start_emit_alarm_signals()
    diag.diagnostic_thermocouple(10.0)
    messages = _recorder(diag.message)
    diag.diagnostic_thermocouple(12.0)
    diag.diagnostic_thermocouple(13.0)
    assert diag.thermocouple_status is ThermocoupleStatus.NORMAL
    assert messages == []


def test_zero_reference_counts_as_breakage():
    diag = Diagnostic()
    diag.diagnostic_thermocouple(0.0)
    diag.diagnostic_thermocouple(0.0)
    assert diag.thermocouple_status is ThermocoupleStatus.BREAKAGE


def test_upper_pressure_alarms_once_and_starts_timer():
    diag = Diagnostic()
    diag.start_emit_alarm_signals()
    alarms = _recorder(diag.alarm_upper_pressure)
    messages = _recorder(diag.message)
    diag.upper_pressure()
    diag.upper_pressure()
    assert alarms == [()]
    assert messages[0][1] is MessageLevel.CRITICAL
    assert diag.pressure is Pressure.UPPER
    assert diag.off_timer_active
    diag.normal_pressure()
    assert not diag.off_timer_active


def test_normal_pressure_after_lower_stops_timer():
    diag = Diagnostic()
    diag.start_emit_alarm_signals()
    lower = _recorder(diag.alarm_lower_pressure)
    normal = _recorder(diag.alarm_normal_pressure)
    diag.lower_pressure()
    assert diag.off_timer_active
    diag.normal_pressure()
    assert lower == [()] and normal == [()]
    assert diag.pressure is Pressure.NORMAL
    assert not diag.off_timer_active


def test_pressure_ignored_when_disabled():
    diag = Diagnostic()
    alarms = _recorder(diag.alarm_upper_pressure)
    diag.upper_pressure()
    assert alarms == []
    assert diag.pressure is Pressure.UNDEFINED
    assert not diag.off_timer_active


def test_timer_fires_smooth_off():
    diag = Diagnostic(off_regulator_delay=0.01)
    fired = threading.Event()
    diag.smooth_off_regulator.connect(fired.set)
    diag.start_emit_alarm_signals()
    diag.upper_pressure()
    assert fired.wait(2.0)


def test_off_regulator_timeout_emits_and_stops():
    diag = Diagnostic()
    diag.start_emit_alarm_signals()
    diag.lower_pressure()
    calls = _recorder(diag.smooth_off_regulator)
    diag.off_regulator_timeout()
    assert calls == [()]
    assert not diag.off_timer_active


def test_start_resets_pressure_state():
    diag = Diagnostic()
    diag.start_emit_alarm_signals()
    normal = _recorder(diag.alarm_normal_pressure)
    diag.normal_pressure()
    diag.normal_pressure()
    diag.start_emit_alarm_signals()
    assert diag.pressure is Pressure.UNDEFINED
    diag.normal_pressure()
    assert normal == [(), ()]


def test_enable_and_stop_toggle_signals():
    diag = Diagnostic()
    diag.enable_emit_alarm_signals(True)
    assert diag.signals_enabled
    diag.stop_emit_alarm_signals()
    assert not diag.signals_enabled