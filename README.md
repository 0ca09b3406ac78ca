# tailord

Building blocks for controlling the hardware of TUXEDO laptops from Python.
The package talks to the `tuxedo_io` kernel device through ioctl calls. It also
reads and writes the sysfs files of the `tuxedo_keyboard` driver and of the
power supply class. It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Reporting hardware capabilities

The `tailor-hwcaps` command prints what the machine supports. This covers the
module version, the device interface and model ID, the ODM performance
profiles, and each fan with its temperature and speed. It also covers the
minimum fan speed, webcam and TDP control, charging profiles and priorities,
and the charge thresholds of the first battery that has them:

```
sudo tailor-hwcaps
```

Options:

- `--device PATH`: the driver device file. The default is `/dev/tuxedo_io`.
- `--charging-dir PATH`: the charging profile sysfs directory. The default is
  `/sys/devices/platform/tuxedo_keyboard/charging_profile`.
- `--power-supply-dir PATH`: the power supply sysfs directory. The default is
  `/sys/class/power_supply`.

Each line is tagged `[OK]`, `[INFO]`, `[ERR]` or `[FATAL]`. Access to
`/dev/tuxedo_io` and to the sysfs files normally needs root.

The same reports are available from Python as lists of lines:

```python
from tailord.hwcaps import report_ioctl, report_charging

for line in report_ioctl("/dev/tuxedo_io"):
    print(line)
for line in report_charging(
    "/sys/devices/platform/tuxedo_keyboard/charging_profile",
    "/sys/class/power_supply",
):
    print(line)
```

## The hardware interface

`tailord.interface.open_interface` opens the device file and finds out whether
a Clevo or a Uniwill device is behind it. It returns an `IoInterface` that
holds the following:

- `module_version`
- `device`: a `HardwareDevice`, for fans, temperatures and performance profiles.
- `webcam`: a `WebcamDevice`. It is set on Clevo devices only.
- `tdp`: a `TdpDevice`. It is set on Uniwill devices only.

`IoInterface` is a context manager that closes the device file.

```python
from tailord.interface import open_interface
from tailord.errors import IoctlError

try:
    io = open_interface("/dev/tuxedo_io")
except IoctlError as err:
    print(f"no TUXEDO ioctl interface: {err}")
else:
    with io:
        device = io.device
        for fan in range(device.get_number_fans()):
            print(fan, device.get_fan_temperature(fan), device.get_fan_speed_percent(fan))
        print(device.get_available_odm_performance_profiles())
```

The device classes are `tailord.devices.ClevoHardware` and
`tailord.uniwill.UniwillHardware`. The raw requests live in `tailord.ioctl`:
`Request`, `read_int`, `read_string`, `write_int` and `mod_version`.

Every failure is raised as a subclass of `tailord.errors.IoctlError`:

- `DeviceNotAvailableError`: a device, fan or TDP slot is missing.
- `InvalidArgsError`: a performance profile name is unknown.
- `FeatureNotAvailableError`: the hardware does not support the feature.
- `Utf8DecodeError`: the driver returned a string that is not valid UTF-8.

## Fan curves and fan control

```python
from tailord.fan_profile import default_fan_profile, load_fan_profile

curve = default_fan_profile()
print(curve.calc_target_fan_speed(65))

custom = load_fan_profile("/etc/tailord/fan/silent.json")
print(custom.to_json())
```

A fan profile file is a JSON list of `{"temp": ..., "fan": ...}` points.
`parse_fan_profile` and `load_fan_profile` clean up the curve as follows:

1. Points whose temperatures do not increase are sorted by temperature.
2. Speeds above 100% are capped at 100%.
3. From 75 °C upward, each speed is raised to a minimum. The minimum is 5% for
   each degree above 75 °C, so it reaches 100% at 95 °C.
4. If the curve never reaches 100%, a point at 100 °C with 100% speed is added.

An empty list raises `ProfileNotFoundError`. Malformed content raises
`InvalidFileContentError`.

`tailord.fan_runtime.create_fan_runtime(fan_idx, device, profile)` returns a
`FanRuntimeHandle` and a `FanRuntime`. Run `await runtime.run()` as a task.
The runtime moves the fan speed towards the curve's target in small steps. It
waits longer between steps while the temperature is stable; `suitable_delay`
ranges from 2000 ms down to about 230 ms. The handle has three methods:

- `override_speed(speed)`: holds a speed for one second.
- `set_profile(profile)`: switches the curve.
- `close()`: stops the runtime, which then puts the fans back into automatic
  mode.

## Performance profiles

`tailord.performance.create_performance_runtime(device, profile, default)`
applies the given profile, or the default when the profile is `None`. It
returns a `PerformanceProfileHandle` and a `PerformanceProfileRuntime`. The
handle has the following members:

- `available_profiles()`
- `set_profile(name)`: an async method.
- `active_profile`
- `close()`

## Keyboard LED animation

`tailord.led_animation` turns a list of `ColorPoint`s into a list of
`(Color, milliseconds)` steps for one animation cycle
(`calculate_color_animation_steps`). Each point carries a `Color`, a
`ColorTransition` (`NONE` or `LINEAR`) and a transition time. Linear
transitions are split into steps of at least 80 ms each. The number of steps is
also limited by how far the colour changes (`decent_linear_steps`).

## Battery charging

`tailord.charging` provides three finders:

- `find_charging_profile` returns a `ChargingProfile`, or `None` when the
  control is missing.
- `find_charging_priority` returns a `ChargingPriority`, or `None` when the
  control is missing.
- `find_first_battery` returns a `BatteryChargeControl` for the first battery
  (by name) that has start/end thresholds, or `None`.

The returned objects read and write the sysfs attributes through
`tailord.sysfs`.

## Profile storage

`tailord.storage` keeps named JSON files below a directory. Its functions are
`normalize_json_path`, `read_file`, `read_json`, `write_file`, `write_json`,
`remove_file`, `move_file` and `list_profiles`.

Names containing `/` or `.` are rejected with `InvalidArgumentError`. Failures
are raised as subclasses of `StorageError`.

## Suspend and shutdown

- `tailord.suspend.SuspendBroadcast` sends suspend (`True`) and wake-up
  (`False`) events to its subscribers. `get_suspend_receiver()` subscribes to
  the process-wide channel. `process_suspend` waits through one suspend and
  wake-up cycle; the fan runtime uses it.
- `tailord.shutdown.setup()` installs handlers for SIGTERM, SIGINT and SIGQUIT
  on the running event loop. It returns an `asyncio.Event`, which is set when
  one of these signals arrives.

## What this package does not do

- There is no daemon or D-Bus service that ties these pieces together.
- Nothing watches the login manager for sleep events. Events reach the suspend
  channel only when your code calls `publish`.
- There is no management of an active profile built from fan, LED and
  performance settings.
- The package does not find keyboard LED devices and does not write colours to
  them. `tailord.led_animation` only computes the animation steps.