"""
Background Scheduler for weigh-in reminders.

Checks once a day which participants have not weighed in yet on a
weigh-in date and logs them.

Usage:
    python -m challenge.scheduler
"""

import logging
import schedule
import time
from datetime import date, datetime
from typing import Optional

from .services.reminders import pending_weigh_ins
from .storage import DatabaseError, get_database
from . import config

logger = logging.getLogger(__name__)


def send_reminders(today: Optional[date] = None) -> int:
    """
    Background job listing missing weigh-ins.

    Returns:
        Number of participants reminded
    """
    print(f"[{datetime.now()}] Checking weigh-in reminders...")
    try:
        due = pending_weigh_ins(get_database(), today)
    except DatabaseError as e:
        print(f"[{datetime.now()}] Error during reminder check: {e}")
        return 0

    reminded = 0
    for entry in due:
        names = [p['name'] for p in entry['participants']]
        print(f"  - {entry['year']} week {entry['week']}: {len(names)} pending")
        for participant in entry['participants']:
            logger.info(
                f"Reminder: {participant['name']} ({participant['userId']}) has no "
                f"weigh-in for week {entry['week']} of {entry['year']}"
            )
        reminded += len(names)

    if not due:
        print(f"[{datetime.now()}] No weigh-in due today")
    return reminded


def main():
    """Main entry point for scheduler."""
    logging.basicConfig(level=config.LOG_LEVEL)

    print("=" * 50)
    print("Weight Loss Challenge - Reminder Scheduler")
    print("=" * 50)

    if config.REMINDERS_ON_STARTUP:
        print("\n[*] Running initial reminder check...")
        send_reminders()

    schedule.every().day.at(config.REMINDER_TIME).do(send_reminders)
    print(f"\n[*] Scheduled to run daily at {config.REMINDER_TIME}")
    print("[*] Press Ctrl+C to stop\n")

    # Keep running
    while True:
        schedule.run_pending()
        time.sleep(60)


if __name__ == '__main__':
    main()
