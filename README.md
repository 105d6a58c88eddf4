# calorimeter

Control and data-acquisition core for a high-temperature drop calorimeter:
thermocouple conversion, furnace diagnostics, cover/valve/sample-lock
interlocks, the ampoule drop detector on a serial line, and session data
recording.

The parts talk to each other through small `Signal` objects (`connect`,
`disconnect`, `emit`), so you can wire them to your own front end, logger or
test harness.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `calorimeter.shared` | `MessageLevel`, `RegulatorMode`, `FileType`, `RegulatorParameters`, `TerconData`, `Signal` |
| `calorimeter.diagnostic` | `Diagnostic` with thermocouple and cooling-pressure checks; `Pressure`, `ThermocoupleStatus` |
| `calorimeter.recorder` | `DataRecorder` and `create_session_dir` for per-day session directories |
| `calorimeter.logview` | `MessageLog`, timestamped log lines for display and for the log file |
| `calorimeter.devices` | `Covers`, `SafetyValve`, `SampleLock` driven through a digital I/O port; `decode_port`, `PortState` |
| `calorimeter.arduino` | `Arduino`, the serial ampoule drop detector (uses pyserial) |
| `calorimeter.adc` | type A1 and K thermocouple polynomials, `moving_average`, `AdcParameters`, `ThermocoupleProcessor`, `LegacyThermocoupleProcessor` |
| `calorimeter.channel` | `Channel`, a TCP channel with per-call timeouts; `ChannelError`, `ChannelClosedError` |
| `calorimeter.conversion` | `convert_u2c`, `format_data_record`, `signal_file_record` |
| `calorimeter.furnace` | `Furnace`, which stamps, records and routes measurements; `save_regulator_settings`, `load_regulator_settings` |

## Examples

Signals:

```python
from calorimeter.shared import Signal

changed = Signal()
changed.connect(print)
changed.emit("furnace ready")
```

Thermocouple conversions:

```python
from calorimeter.adc import moving_average, temperature_to_volt_a1, volt_to_temperature_a1

cold_junction = temperature_to_volt_a1(17.0)        # mV at room temperature
reading = moving_average([10.02, 10.05, 10.01])     # mV from the ADC
print(volt_to_temperature_a1(reading + cold_junction))
```

Processing one block of ADC samples (index 1 feeds channel 1, index 2 feeds
channel 0); each record is also emitted on `data_send`:

```python
from calorimeter.adc import AdcParameters, ThermocoupleProcessor

processor = ThermocoupleProcessor(AdcParameters(room_temperature=20.0, thermocouple_type="K"))
for record in processor.process([0.0, 1.2, 10.5]):
    print(record.channel, record.value)
```

Temperature from a thermocouple EMF in mV, with a 30 °C cold junction:

```python
from calorimeter.conversion import convert_u2c

print(convert_u2c(5.0))
```

Decoding the digital I/O status word into cover and valve states:

```python
from calorimeter.devices import decode_port

print(decode_port(0x00DB0000))
```

Driving the covers: any object with `write_port(port, pin, value)` and
`read_ports()` can serve as the I/O module, and a scheduler
`(delay_seconds, callback)` replaces the default background timers:

```python
from calorimeter.devices import Covers

class PrintingIO:
    def write_port(self, port, pin, value):
        print("port", port, "pin", pin, value)

    def read_ports(self):
        return 0x00FF0000

covers = Covers(PrintingIO(), scheduler=lambda delay, callback: None)
covers.open_top_cover()
```

Recording a session: `DataRecorder` creates `data/DD_MM_YYYY` (or the first
free `_N` variant) under the given directory, and `Furnace` writes the data
file and passes process values to the regulator signals:

```python
from calorimeter.furnace import Furnace
from calorimeter.recorder import DataRecorder
from calorimeter.shared import TerconData

with DataRecorder(".") as recorder:
    furnace = Furnace(recorder)
    furnace.furnace_value.connect(print)
    furnace.data_received(TerconData(channel=2, device_number=5, value=812.4))
    furnace.receive_data(TerconData(channel=2, device_number=5, value=812.4))
```

Regulator settings are kept in an INI file with one section per regulator
(`Regulator of main heater`, `Regulator of thermostat`, `Regulator of up
heater`, `Regulator of down heater`); `load_regulator_settings` turns missing
values into zero.

## What the package does not do

- It has no user interface and installs no command.
- It contains no PID regulator: `RegulatorParameters` only holds the tuning
  values, and `Furnace` only emits the process values a regulator would use.
- It does not talk to the analogue output, analogue input or digital I/O
  modules of the acquisition crate itself. `Channel` provides the TCP
  transport, `ThermocoupleProcessor` works on samples you supply, and the
  devices in `calorimeter.devices` expect you to pass an I/O object.
- It does not read the temperature meters; measurements enter as `TerconData`
  records you hand to `Furnace`.