import logging

from utils import (
    BatteryState,
    BatteryStatus,
    DisplayConfig,
    configure_logging,
    read_config,
)


def lower_refresh_rate(config, outputs):
    screen = config["laptop_screen"]
    target = config["target_refresh_rate"]
    logging.info(
        f"Battery is discharging. Lowering refresh rate on {screen} to {target} Hz."
    )

    output, modes = DisplayConfig.find_output(outputs, screen)
    mode = DisplayConfig.find_rate_mode(modes, target)
    if mode is None:
        logging.info(f"Could not find a {target} Hz mode for {screen}.")
        return None

    rate = config["battery_rate"]
    DisplayConfig.set_mode(
        output, config["resolution"], rate, config["command_timeout"]
    )
    logging.info(f"Refresh rate successfully set to {rate} Hz.")
    return rate


def raise_refresh_rate(config, outputs):
    screen = config["laptop_screen"]
    logging.info(
        f"Battery is charging or full. Setting highest refresh rate on {screen}."
    )

    output, modes = DisplayConfig.find_output(outputs, screen)
    if DisplayConfig.find_active_mode(modes) is None:
        logging.info(f"Could not find the active mode for {screen}.")
        return None

    rate = config["ac_rate"]
    DisplayConfig.set_mode(
        output, config["resolution"], rate, config["command_timeout"]
    )
    logging.info("Refresh rate successfully set to highest available.")
    return rate


def adjust_refresh_rate(config):
    """
    Pick the refresh rate for the current battery state and apply it.
    Returns the requested rate, or None when xrandr was left alone.
    """
    timeout = config["command_timeout"]
    state = BatteryStatus.get_state(timeout)

    if state == BatteryState.DISCHARGING:
        return lower_refresh_rate(config, DisplayConfig.query_modes(timeout))
    if state in (BatteryState.CHARGING, BatteryState.FULL):
        return raise_refresh_rate(config, DisplayConfig.query_modes(timeout))

    logging.info(f"Battery state is {state.value}. Leaving refresh rate unchanged.")
    return None


def main():
    configure_logging("refresh_rate")
    logging.info("Starting refresh rate script")
    config = read_config("config.json")
    adjust_refresh_rate(config)


if __name__ == "__main__":
    main()
