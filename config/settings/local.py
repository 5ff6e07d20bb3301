from .base import *  # noqa

DEBUG = True
ALLOWED_HOSTS = ["*"]

# In local, make email backend console
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
