import os
import sys

import yaml

from app.models import User
from app.services import run
from app import settings

try:
    from app.optional import extra
except ImportError:
    extra = None


def main() -> None:
    run(User(os.environ.get("USER", "anonymous")), settings.DEBUG, sys.argv, yaml, extra)
