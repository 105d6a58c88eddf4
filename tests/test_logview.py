import datetime as dt

from calorimeter.logview import MessageLog
from calorimeter.shared import MessageLevel

FIXED = dt.time(3, 4, 5, 678000)


def _log(elapsed=None):
    log = MessageLog(elapsed_ms=elapsed, clock=lambda: FIXED)
    lines = []
    log.send_message_to_file.connect(lines.append)
    return log, lines


def test_information_line_format():
    log, lines = _log()
    log.append_message("hello", MessageLevel.INFORMATION)
    assert lines == ["03:04:05.678\tInformation:> hello\r\n"]
    assert log.entries[-1].text == "03:04:05.678\thello"
    assert log.entries[-1].color == "black"


def test_levels_choose_prefix_and_color():
    log, lines = _log()
    log.append_message("w", MessageLevel.WARNING)
    log.append_message("c", MessageLevel.CRITICAL)
    assert lines[0].endswith("\tWarning:> w\r\n")
    assert lines[1].endswith("\tCritical:> c\r\n")
    assert [e.color for e in log.entries] == ["blue", "red"]


def test_empty_message_is_blank_and_not_sent():
    log, lines = _log()
    log.append_message("ignored", MessageLevel.EMPTY)
    assert lines == []
    assert log.entries[-1].text == ""


def test_elapsed_time_included_when_valid():
    log, lines = _log(elapsed=lambda: 1500)
    log.append_message("m", MessageLevel.INFORMATION)
    assert "(1.5)\t" in lines[0]
    assert log.entries[-1].text.endswith("(1.5)\tm")


def test_invalid_timer_omits_elapsed():
    log, lines = _log(elapsed=lambda: None)
    log.append_message("m", MessageLevel.WARNING)
    assert "(" not in lines[0]


def test_entries_accumulate_in_order():
    log, lines = _log()
    for word in ("a", "b", "c"):
        log.append_message(word, MessageLevel.INFORMATION)
    assert [e.text.split("\t")[-1] for e in log.entries] == ["a", "b", "c"]
    assert len(lines) == 3