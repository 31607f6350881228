"""
Statemap - Demo

Builds a small timeline for two hosts and prints the statemap stream:
the header first, then every state change as an offset from the start.

    python scripts/demo_statemap.py > demo.statemap.json
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import datetime, timedelta, timezone

from statemap import TimelineStore
from statemap.config import settings

logging.basicConfig(level=settings.LOG_LEVEL, stream=sys.stderr)

store = TimelineStore.from_settings()

now = datetime.now(timezone.utc)
store.register_event("my_host", "test0", now)
store.register_event("other_host", "test0", now + timedelta(milliseconds=250))
store.register_event("other_host", "test1", now + timedelta(seconds=1), tag="warmup")
store.register_event("my_host", "test1", now + timedelta(seconds=2))

for line in store.into_cursor():
    print(line)
