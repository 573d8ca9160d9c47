"""Entry point for the tickminder save-file tool."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tickminder import storage
from tickminder.config import load_settings
from tickminder.errors import SaveFormatError
from tickminder.host import ManualClock
from tickminder.manager import ReminderManager
from tickminder.reminders import (
    REMINDER_KINDS,
    ConditionMonitorReminder,
    EventMonitorReminder,
    Reminder,
)
from tickminder.session import Session
from tickminder.ticks import format_ticks_left

HELP = """\
tickminder -- tick-based reminders and condition monitors

commands:
  tickminder list FILE       Show the reminders stored in a save file
  tickminder prune FILE      Drop finished reminders and merge duplicate monitors
  tickminder help            Show this help message

examples:
  tickminder list ~/.tickminder/reminders.yaml --tick 120000
  tickminder list save.yaml --kind condition
  tickminder prune save.yaml
"""

log = logging.getLogger(__name__)


class _OfflineNotifier:
    """Notification sink for offline inspection; nothing is ever due to fire."""

    def notify(self, title: str, body: str, *, pause: bool = False) -> None:
        log.debug("Suppressed notification %r", title)


def _session(tick: int) -> Session:
    return Session(clock=ManualClock(tick), notifier=_OfflineNotifier(), settings=load_settings())


def _summary(r: Reminder) -> str:
    if r.label_override:
        return r.label_override
    if isinstance(r, ConditionMonitorReminder):
        who = r.provider.entity_label or r.entity_id
        return f"monitor for {who} ({len(r.tracked_ids)} tracked)"
    if isinstance(r, EventMonitorReminder):
        return f"event {r.def_name} [{r.group_id}]"
    return r.kind


def _load_manager(path: Path, tick: int) -> ReminderManager:
    manager = ReminderManager(_session(tick))
    manager.start()
    manager.load(path)
    return manager


def _handle_list(path: Path, tick: int, kind: str | None) -> None:
    try:
        manager = _load_manager(path, tick)
    except SaveFormatError as exc:
        print(f"cannot read {path}: {exc}")
        sys.exit(1)
    reminders = manager.get_active(kind)
    if not reminders:
        print("no active reminders")
        return
    for r in reminders:
        left = format_ticks_left(r.trigger_tick - tick)
        print(
            f"  {r.id}  {r.kind:9s}  {r.frequency.display:16s}  "
            f"@{r.trigger_tick:<10d} {left:32s}  {_summary(r)}"
        )


def _handle_prune(path: Path) -> None:
    try:
        before = len(storage.read_records(path))
        manager = _load_manager(path, 0)
    except SaveFormatError as exc:
        print(f"cannot read {path}: {exc}")
        sys.exit(1)
    manager.save(path)
    removed = before - len(manager)
    print(f"pruned {removed} reminder(s), {len(manager)} left in {path}")


def run_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="tickminder")
    sub = parser.add_subparsers(dest="action")

    list_p = sub.add_parser("list", help="Show reminders in a save file")
    list_p.add_argument("file", type=Path, help="Save file to read")
    list_p.add_argument("--tick", type=int, default=0, help="Current tick for time-left display")
    list_p.add_argument("--kind", choices=sorted(REMINDER_KINDS), default=None, help="Only this kind")

    prune_p = sub.add_parser("prune", help="Drop finished reminders and merge duplicates")
    prune_p.add_argument("file", type=Path, help="Save file to rewrite")

    args = parser.parse_args(argv)

    if args.action == "list":
        _handle_list(args.file, args.tick, args.kind)
    elif args.action == "prune":
        _handle_prune(args.file)
    else:
        parser.print_help()
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] in ("help", "--help", "-h"):
        print(HELP)
        return
    logging.basicConfig(
        level=load_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_command(argv)


if __name__ == "__main__":
    main()
