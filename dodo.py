# -*- coding: utf-8 -*-
# pydoit task file
# see https://pydoit.org/
# run from this dir with `doit`, or `doit list`, `doit help` etc. (pip install doit 1st)

from doit.action import CmdAction


def _pytest_command(keyword="", speed="", retry=False, print_logs=False):
    """Build the pytest command line for the test suite."""
    cmd = ["pytest", "--color=yes", "-vv"]
    if print_logs:
        cmd.append("--capture=no")
    if retry:
        cmd.append("--lf")
    if keyword:
        cmd.extend(["-k", f'"{keyword}"'])
    if speed in ("fast", "not slow"):
        cmd.extend(["-m", '"not slow"'])
    elif speed == "slow":
        cmd.extend(["-m", "slow"])
    elif speed not in ("", "all"):
        raise ValueError(f"Invalid speed filter: {speed}. Use 'slow', 'fast' or 'all'")
    cmd.append("test/logic/")
    return " ".join(cmd)


def task_install():
    """Install scopesync in editable mode, with test dependencies"""
    return {
        "actions": ["pip install -e .[test]"],
        "verbosity": 2,
    }


def task_test():
    """Run the test suite (test/logic/).

    doit test -k gateway        # tests matching "gateway"
    doit test -s fast -p        # skip slow tests, print logs
    doit test -r                # rerun last failures
    """

    def router(keyword, speed, retry, print_logs):
        try:
            return _pytest_command(keyword, speed, retry, print_logs)
        except ValueError as e:
            return f"echo 'Error: {str(e)}' && exit 1"

    return {
        "actions": [CmdAction(router)],
        "params": [
            {"name": "keyword", "short": "k", "default": ""},
            {"name": "speed", "short": "s", "default": ""},
            {"name": "retry", "short": "r", "default": False, "type": bool},
            {"name": "print_logs", "short": "p", "default": False, "type": bool},
        ],
        "verbosity": 2,
    }


def task_mock():
    """Serve the mock device on port 8080 (Ctrl-C to stop)."""
    return {
        "actions": ["scopesync mock -p 8080 -ll DEBUG"],
        "verbosity": 2,
    }


def task_format():
    """Format code using ruff (import sort + format) in src/, test/ and dodo.py."""
    return {
        "actions": [
            "ruff check --select I --fix src/scopesync test/ dodo.py",
            "ruff format src/scopesync test/ dodo.py",
        ],
        "verbosity": 2,
    }
