#!/usr/bin/env python3
"""
makefile.py - Task runner for the lakeindex project.

Usage:
    python makefile.py <target>

Requires: pip install -e ".[test,dev]"
"""

import shutil
import subprocess
import sys
from pathlib import Path

from colorama import Fore, Style
from colorama import init as _colorama_init

_colorama_init(autoreset=True)

PYTHON = sys.executable


def print_header(title):
    bar = Fore.CYAN + Style.BRIGHT + "=" * 52 + Style.RESET_ALL
    label = Fore.CYAN + Style.BRIGHT + f"  {title}" + Style.RESET_ALL
    print(f"\n{bar}\n{label}\n{bar}")


def print_step(msg):
    print(f"{Fore.YELLOW}-->{Style.RESET_ALL} {msg}")


def print_success(msg):
    print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {msg}")


def run_cmd(args, allow_failure=False):
    """
    Run a command as a subprocess, streaming output directly to the terminal.
    Exits with the subprocess exit code on failure unless allow_failure=True.
    """
    try:
        result = subprocess.run(args)
    except FileNotFoundError:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Command not found: '{args[0]}'")
        print(f"        Ensure '{args[0]}' is installed and on your PATH.")
        if not allow_failure:
            sys.exit(127)
        return 127
    if result.returncode != 0 and not allow_failure:
        sys.exit(result.returncode)
    return result.returncode


def pytest(*args):
    run_cmd([PYTHON, "-m", "pytest", *args])


def target_test():
    print_header("Running All Tests")
    pytest("tests", "-v")


def target_test_query():
    print_header("Running Planner Tests")
    pytest("tests/test_query", "-v")


def target_test_catalog():
    print_header("Running Catalog and Index Lifecycle Tests")
    pytest("tests/test_catalog", "tests/test_index", "-v")


def target_test_fast():
    print_header("Running Tests (stop on first failure)")
    pytest("tests", "-x", "-q")


def target_install():
    print_header("Installing lakeindex (editable, with test + dev extras)")
    run_cmd([PYTHON, "-m", "pip", "install", "-e", ".[test,dev]"])
    print_success("Install complete")


def target_clean():
    print_header("Cleaning Caches")
    removed = 0
    for pattern in ("__pycache__", ".pytest_cache", "*.egg-info"):
        for path in Path(".").rglob(pattern):
            if path.is_dir():
                shutil.rmtree(path, ignore_errors=True)
                removed += 1
    print_success(f"Removed {removed} cache directories")


def target_example():
    print_header("Running Covering Index Walkthrough")
    run_cmd([PYTHON, "-m", "lakeindex.main"])


def target_check():
    print_header("Full Check: install + test + example")
    print_step("Installing package")
    target_install()
    print_step("Running test suite")
    target_test()
    print_step("Running walkthrough")
    target_example()
    print_success("All checks passed")


TARGETS = {
    "test": (target_test, "Run all tests", "Testing"),
    "test-query": (target_test_query, "Run rewriter, executor and plan tests", "Testing"),
    "test-catalog": (target_test_catalog, "Run catalog and lifecycle tests", "Testing"),
    "test-fast": (target_test_fast, "Run tests, stop on first failure", "Testing"),
    "install": (target_install, "pip install -e .[test,dev]", "Tools"),
    "clean": (target_clean, "Remove __pycache__ and pytest caches", "Tools"),
    "example": (target_example, "Run the covering index walkthrough", "Run"),
    "check": (target_check, "install + test + example", "Run"),
    "help": (None, "Show this help message", "Meta"),
}


def target_help():
    from collections import defaultdict

    title = (
        Fore.CYAN
        + Style.BRIGHT
        + "lakeindex - Available Commands"
        + Style.RESET_ALL
    )
    print(f"\n{title}\n")
    groups = defaultdict(list)
    for name, (_, desc, group) in TARGETS.items():
        groups[group].append((name, desc))
    group_order = ["Testing", "Run", "Tools", "Meta"]
    for group in group_order:
        if group not in groups:
            continue
        header = Fore.YELLOW + Style.BRIGHT + f"{group}:" + Style.RESET_ALL
        print(header)
        for name, desc in groups[group]:
            padded = name.ljust(24)
            print(f"  {Fore.GREEN}{padded}{Style.RESET_ALL}  {desc}")
        print()


TARGETS["help"] = (target_help, "Show this help message", "Meta")


def main():
    if len(sys.argv) < 2:
        target_help()
        sys.exit(0)

    name = sys.argv[1]

    if name not in TARGETS:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Unknown target: '{name}'")
        print("  Run:  python makefile.py help  to list all available targets.")
        sys.exit(1)

    func, _, _ = TARGETS[name]
    func()


if __name__ == "__main__":
    main()
