import os
import json
import shlex
import logging
import subprocess
from collections import namedtuple
from enum import Enum
from os import path
from logging.handlers import TimedRotatingFileHandler

import psutil

DEFAULT_CONFIG = {
    "laptop_screen": "eDP",
    "target_refresh_rate": "60.00",
    "resolution": "2560x1600",
    "battery_rate": 60,
    "ac_rate": 240,
    "command_timeout": 2,
}

OUTPUT_STATES = ("connected", "disconnected", "unknown")


# File Operations
def getAbsPath(relPath):
    basepath = path.dirname(__file__)
    return path.abspath(path.join(basepath, relPath))


def read_config(config_file="config.json"):
    """Built-in defaults overlaid with config_file, if it exists"""
    config = dict(DEFAULT_CONFIG)
    config_path = getAbsPath(config_file)
    if os.path.exists(config_path):
        with open(config_path, "r") as file:
            config.update(json.load(file))
    return config


# Command Execution
def execute_command(command, timeout=2):
    timeout = int(timeout)
    try:
        logging.info(f"Executing command: {command}")
        result = subprocess.run(
            ["bash", "-c", command],
            timeout=timeout,
            text=True,
            capture_output=True,
        )
        output = result.stdout.strip()
        if result.returncode != 0:
            logging.error(
                f"Command failed with status {result.returncode}: {result.stderr.strip()}"
            )
    except subprocess.TimeoutExpired as e:
        logging.warning(f"Command timed out after {timeout} seconds")
        output = e.stdout if e.stdout else ""
    except OSError as e:
        logging.error(f"Command execution error: {type(e).__name__}")
        output = ""
    return output if isinstance(output, str) else ""


# Battery Status Functions
class BatteryState(Enum):
    DISCHARGING = "discharging"
    CHARGING = "charging"
    FULL = "full"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token):
        token = (token or "").strip().lower()
        if token in ("full", "fully-charged"):
            return cls.FULL
        if token == "charging":
            return cls.CHARGING
        if token == "discharging":
            return cls.DISCHARGING
        return cls.UNKNOWN


def parse_upower_state(output):
    """Return the value of the first `state:` line of `upower -i` output"""
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "state":
            return value.strip()
    return None


class BatteryStatus:
    @staticmethod
    def find_device(timeout=2):
        for line in execute_command("upower -e", timeout).splitlines():
            if "BAT" in line:
                return line.strip()
        return None

    @staticmethod
    def get_psutil_state():
        battery = psutil.sensors_battery()
        if battery is None or battery.power_plugged is None:
            return BatteryState.UNKNOWN
        if battery.power_plugged:
            if battery.percent >= 100:
                return BatteryState.FULL
            return BatteryState.CHARGING
        return BatteryState.DISCHARGING

    @staticmethod
    def get_state(timeout=2):
        device = BatteryStatus.find_device(timeout)
        if device is None:
            logging.info("No battery device found by upower, asking psutil instead")
            return BatteryStatus.get_psutil_state()
        output = execute_command(f"upower -i {shlex.quote(device)}", timeout)
        token = parse_upower_state(output)
        if token is None:
            logging.info(f"No state reported for {device}")
        return BatteryState.from_token(token)


# Display Mode Functions
DisplayMode = namedtuple("DisplayMode", ["name", "rate", "current", "preferred"])


def _split_rates(tokens):
    # xrandr writes markers glued to the rate ("240.00*+") or on their own ("60.00 +")
    rates = []
    for token in tokens:
        value = token.rstrip("*+")
        markers = token[len(value):]
        if value:
            rates.append([value, markers])
        elif rates:
            rates[-1][1] += markers
    return rates


def parse_xrandr_modes(output):
    """
    Parse `xrandr --query` output into {output name: [DisplayMode, ...]}.
    Every rate on a mode line becomes its own DisplayMode.
    """
    outputs = {}
    current_output = None
    for line in output.splitlines():
        if not line.strip():
            continue
        tokens = line.split()
        if not line[0].isspace():
            if len(tokens) > 1 and tokens[1] in OUTPUT_STATES:
                current_output = tokens[0]
                outputs[current_output] = []
            else:
                current_output = None
            continue
        if current_output is None or "x" not in tokens[0]:
            continue
        for value, markers in _split_rates(tokens[1:]):
            try:
                rate = float(value)
            except ValueError:
                continue
            outputs[current_output].append(
                DisplayMode(tokens[0], rate, "*" in markers, "+" in markers)
            )
    return outputs


class DisplayConfig:
    @staticmethod
    def query_modes(timeout=2):
        return parse_xrandr_modes(execute_command("xrandr --query", timeout))

    @staticmethod
    def find_output(outputs, screen):
        """
        Outputs are matched by prefix, so "eDP" also finds "eDP-1".
        An exact name wins, then the first match that lists any modes.
        """
        matches = [name for name in outputs if name.startswith(screen)]
        matches.sort(key=lambda name: name != screen)
        for name in matches:
            if outputs[name]:
                return name, outputs[name]
        if matches:
            return matches[0], outputs[matches[0]]
        return None, []

    @staticmethod
    def find_rate_mode(modes, target_rate):
        target = f"{float(target_rate):.2f}"
        for mode in modes:
            if f"{mode.rate:.2f}" == target:
                return mode
        return None

    @staticmethod
    def find_active_mode(modes):
        for mode in modes:
            if mode.current:
                return mode
        return None

    @staticmethod
    def set_mode(output, resolution, rate, timeout=2):
        command = (
            f"xrandr --output {shlex.quote(output)} "
            f"--mode {shlex.quote(resolution)} --rate {rate}"
        )
        return execute_command(command, timeout)


# Logging Configuration
def configure_logging(log_name, log_dir=None):
    log_dir = log_dir or getAbsPath("logs")
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(logging.INFO)
    if any(isinstance(h, TimedRotatingFileHandler) for h in logger.handlers):
        return

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    file_handler = TimedRotatingFileHandler(
        filename=os.path.join(log_dir, f"{log_name}.log"),
        when="midnight",
        interval=1,
        backupCount=1,
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
