"""
Settings entry point for DJANGO_SETTINGS_MODULE=config.settings.

DJANGO_ENV=production loads production.py (DATABASE_URL, REDIS_URL, SECRET_KEY
required); anything else loads local.py.
"""
import os

if os.environ.get("DJANGO_ENV", "local").lower() == "production":
    from .production import *  # noqa
else:
    from .local import *  # noqa
