from .base import *  # noqa

DEBUG = True
LOG_LEVEL = "DEBUG"
LOGGING["loggers"]["landhud"]["level"] = LOG_LEVEL  # noqa: F405
