#!/usr/bin/env python3
"""
Banker's Safety Checker
Main entry point.

Reads a snapshot of Available / Max / Allocation plus an optional request,
decides whether the system is safe, and whether granting the request keeps
it safe.
"""

import argparse
import sys
from typing import List, Optional, TextIO

from models.resource_state import ResourceState, StateConstructionError
from utils.input_parser import load_description, InputFormatError
from utils.logger import CheckerLogger
from utils.report import format_evaluation
from algorithms.avoidance import evaluate_request


EXIT_OK = 0
EXIT_INPUT_ERROR = 1


def run_check(
    source: str,
    show_state: bool = False,
    verbose: bool = False,
    log_file: Optional[str] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None
) -> int:
    """
    Parse the input, evaluate the request (if any) and print the report.

    Stages:
    1. Parse input into a SystemDescription
    2. Build ResourceState and compute Need
    3. Evaluate the request on a copy of the state
    4. Print report lines

    Args:
        source: Input path, or "-" for standard input
        show_state: Print the full parsed state before the report
        verbose: Enable debug diagnostics
        log_file: Optional file that also receives diagnostics
        stdin: Input stream used for "-" (defaults to sys.stdin)
        stdout: Report stream (defaults to sys.stdout)
        stderr: Diagnostics stream (defaults to sys.stderr)

    Returns:
        Process exit status (0 on success or any decision, 1 on bad input)
    """
    out = stdout if stdout is not None else sys.stdout
    try:
        logger = CheckerLogger(verbose=verbose, log_file=log_file, stream=stderr)
    except OSError as e:
        CheckerLogger(stream=stderr).error(f"Cannot open log file {log_file}: {e}")
        return EXIT_INPUT_ERROR

    try:
        try:
            description = load_description(source, stdin=stdin)
            state = ResourceState.from_description(description, logger=logger)
        except (InputFormatError, StateConstructionError) as e:
            logger.error(str(e))
            return EXIT_INPUT_ERROR

        logger.debug(
            f"Loaded {state.num_processes} processes, {state.num_resources} resource types; "
            f"available: {list(state.available_vector)}"
        )

        if show_state:
            for line in state.render_state():
                print(line, file=out)

        if description.request is None:
            logger.debug("No request present - nothing to evaluate")
            return EXIT_OK

        evaluation = evaluate_request(state, description.request, logger=logger)
        for line in format_evaluation(evaluation):
            print(line, file=out)

        return EXIT_OK
    finally:
        logger.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the checker."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm safety checker"
    )
    parser.add_argument(
        'input',
        nargs='?',
        default='-',
        help="Input file (text format, or .json scenario); '-' reads standard input (default)"
    )
    parser.add_argument(
        '--show-state',
        action='store_true',
        help='Print Available, Max, Allocation and Need before the report'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose diagnostics on stderr'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write diagnostics to this file'
    )

    args = parser.parse_args(argv)

    return run_check(
        args.input,
        show_state=args.show_state,
        verbose=args.verbose,
        log_file=args.log_file
    )


if __name__ == '__main__':
    sys.exit(main())
