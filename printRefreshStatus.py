from utils import BatteryStatus, DisplayConfig, read_config


def format_status(state, screen, output, mode):
    if mode is None:
        return f"| {state.value} | {screen} no active mode |"
    return f"| {state.value} | {output} {mode.name}@{mode.rate:.2f}Hz |"


def main():
    config = read_config("config.json")
    timeout = config["command_timeout"]
    screen = config["laptop_screen"]

    state = BatteryStatus.get_state(timeout)
    output, modes = DisplayConfig.find_output(
        DisplayConfig.query_modes(timeout), screen
    )
    print(format_status(state, screen, output, DisplayConfig.find_active_mode(modes)))


if __name__ == "__main__":
    main()
