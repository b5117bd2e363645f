from __future__ import annotations

import pytest

import utils

XRANDR_EDP = """Screen 0: minimum 320 x 200, current 2560 x 1600, maximum 16384 x 16384
eDP connected primary 2560x1600+0+0 (normal left inverted right x axis y axis) 345mm x 215mm
   2560x1600    240.00*+  60.00 +
   1920x1200    240.00    60.00
   1920x1080    60.00
HDMI-A-0 disconnected (normal left inverted right x axis y axis)
"""

UPOWER_DEVICES = """/org/freedesktop/UPower/devices/line_power_ACAD
/org/freedesktop/UPower/devices/battery_BAT1
/org/freedesktop/UPower/devices/DisplayDevice
"""


def upower_info(state: str) -> str:
    return f"""  native-path:          BAT1
  vendor:               ASUSTeK
  power supply:         yes
  has history:          yes
  battery
    present:             yes
    rechargeable:        yes
    state:               {state}
    warning-level:       none
    percentage:          78%
"""


class FakeCommands:
    """Stands in for execute_command, answering by command prefix."""

    def __init__(self) -> None:
        self.responses: dict[str, str] = {}
        self.calls: list[str] = []

    def __call__(self, command: str, timeout: int = 2) -> str:
        self.calls.append(command)
        for prefix in sorted(self.responses, key=len, reverse=True):
            if command.startswith(prefix):
                return self.responses[prefix]
        return ""

    def setup(self, state: str | None, xrandr: str = XRANDR_EDP) -> "FakeCommands":
        if state is not None:
            self.responses["upower -e"] = UPOWER_DEVICES
            self.responses["upower -i"] = upower_info(state)
        self.responses["xrandr --query"] = xrandr
        return self

    @property
    def mode_sets(self) -> list[str]:
        return [c for c in self.calls if c.startswith("xrandr --output")]


@pytest.fixture
def commands(monkeypatch) -> FakeCommands:
    fake = FakeCommands()
    monkeypatch.setattr(utils, "execute_command", fake)
    return fake


@pytest.fixture
def xrandr_edp() -> str:
    return XRANDR_EDP


@pytest.fixture
def upower_output():
    return upower_info
