#!/usr/bin/env python
"""Hackers Collective management entry point (runserver, migrate, test, shell_plus...)."""
import os
import sys


def main():
    # config.settings picks local or production from DJANGO_ENV
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Install the project with `pip install -e .[test]` "
            "inside an activated virtualenv."
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
