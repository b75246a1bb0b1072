#!/usr/bin/env python3
"""
Command-line interface for the NMT leak probe
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from .config import DEFAULT_CYCLES, Config
from .container import Container
from .errors import ProbeError
from .services.logging_service import LogLevel
from .ui.report import print_result

# Exit code for usage errors and aborted runs; 0/1/77 come from ProbeResult
EXIT_ERROR = 2

LOG_STYLES = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: None,
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "red",
    LogLevel.CRITICAL: "bold red",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='nmt-leak-probe',
        description='Check that jmethodID block memory does not grow across class unloading',
        epilog=(
            'Example: nmt-leak-probe -- $JDK/bin/java -agentlib:SimpleAgent '
            '-Djava.library.path=driver/build -Dleakdriver.classes=driver/build/unloadable '
            '-cp driver/build/classes LeakDriver'
        ),
    )
    parser.add_argument('--cycles', '-n', type=int,
                        help=f'Load/unload cycles per round (default: {DEFAULT_CYCLES})')
    parser.add_argument('--java-home', type=str,
                        help='JDK home; java and jcmd are taken from its bin/ directory '
                             '(default: next to the target launcher)')
    parser.add_argument('--java', dest='java_binary', type=str,
                        help='java launcher used to inspect the host JVM (default: the target launcher)')
    parser.add_argument('--jcmd', dest='jcmd_binary', type=str,
                        help='jcmd binary used for NMT baseline and diffs')
    parser.add_argument('--marker', type=str,
                        help='NMT call-site frame whose malloc figure is sampled')
    parser.add_argument('--strict', action='store_true',
                        help='Fail the run when a report has no sample instead of using 0')
    parser.add_argument('--output', '-o', dest='output_dir', type=str,
                        help='Directory to save the JSON result in')
    parser.add_argument('--dashboard', '-d', action='store_true',
                        help='Show a live dashboard while the probe runs')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Show debug logging')
    parser.add_argument('target_command', nargs=argparse.REMAINDER,
                        help='Command that starts the target JVM (after --)')
    return parser


def build_config(args: argparse.Namespace) -> Config:
    """Create the Config from parsed arguments, leaving unset options to defaults"""
    target_command = list(args.target_command)
    if target_command and target_command[0] == '--':
        target_command = target_command[1:]

    overrides = {}
    if target_command:
        overrides['target_command'] = target_command
    if args.strict:
        overrides['allow_missing_sample'] = False
    for name in ('cycles', 'java_home', 'java_binary', 'jcmd_binary', 'marker', 'output_dir'):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return Config(**overrides)


def make_container(config: Config) -> Container:
    container = Container()
    container.config.override(config)
    return container


def attach_console(container: Container, console: Console, verbose: bool):
    """Print log records to the console"""
    logging_service = container.logging_service()
    logging_service.set_level(logging.DEBUG if verbose else logging.INFO)

    def log_handler(message: str, level: LogLevel):
        console.print(Text(message, style=LOG_STYLES.get(level) or ""))

    logging_service.add_handler(log_handler)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console(stderr=True)
    try:
        config = build_config(args)
    except ValidationError as e:
        console.print(Text(f"Invalid configuration:\n{e}", style="red"))
        return EXIT_ERROR

    container = make_container(config)

    if args.dashboard:
        from .ui import dashboard

        container.wire(modules=[dashboard])
        app = dashboard.LeakProbeDashboard()
        app.run()
        if app.error is not None or app.result is None:
            return EXIT_ERROR
        result = app.result
    else:
        attach_console(container, console, args.verbose)
        try:
            result = container.leak_probe().run()
        except (ProbeError, OSError, ValueError) as e:
            container.logging_service().error(f"Probe aborted: {e}")
            return EXIT_ERROR

    print_result(result, Console())
    return result.exit_code


def run():
    """Entry point for the CLI"""
    sys.exit(main())
