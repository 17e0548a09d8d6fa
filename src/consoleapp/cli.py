"""
consoleapp demo - a heartbeat app built on ConsoleApp

Usage:
    consoleapp-demo                 - Beat once a second until stopped
    consoleapp-demo --beats 3       - Beat three times and exit
    consoleapp-demo -c demo.ini     - Read interval/beats from a config file
"""

import time

from consoleapp.core import ConsoleApp
from consoleapp.utils.options import OptionDefinition


class HeartbeatApp(ConsoleApp):
    """Logs a heartbeat every ``interval`` seconds."""

    app_name = "consoleapp-demo"

    @classmethod
    def get_option_parser(cls, prog=None):
        parser = super().get_option_parser(prog)
        parser.add_option(
            OptionDefinition("b", "beats", "Number of heartbeats, 0 runs until stopped", takes_value=True)
        )
        return parser

    def run(self):
        interval = float(self.config.get("interval", 1.0))
        beats = self.options.extra.get("beats") or self.config.get("beats", 0)
        beats = int(beats)

        count = 0
        while not self.shutdown_requested:
            count += 1
            self.log(f"Heartbeat {count}")
            if beats and count >= beats:
                break
            time.sleep(interval)


def main(argv=None):
    """Main CLI entry point."""
    return HeartbeatApp.launch(argv)


if __name__ == "__main__":
    raise SystemExit(main())
