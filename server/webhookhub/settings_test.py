"""
Django settings for running the test suite.
"""
import os

os.environ.setdefault('USE_SQLITE_FOR_TESTS', 'true')

from webhookhub.settings import *  # noqa: E402,F401,F403
