import re
from datetime import datetime, timedelta

from giglist import config


def trim_log_by_time(log_path, retention_days=14):
    """
    Remove log entries older than retention_days.
    Returns list of lines to keep.
    """
    if not log_path.exists():
        return []

    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    cutoff_str = cutoff.strftime("%Y-%m-%d %H:%M:%S")

    kept_lines = []
    current_entry_recent = False

    with open(log_path, "r", encoding="utf-8") as f:
        for line in f:
            match = re.match(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]", line)
            if match:
                current_entry_recent = match.group(1) >= cutoff_str

            if current_entry_recent:
                kept_lines.append(line)

    return kept_lines


def write_run_log(log_lines, log_path=None, retention_days=None):
    """Append this run's entries to the log file, dropping expired entries."""
    log_path = log_path or config.LOG_PATH
    retention_days = config.LOG_RETENTION_DAYS if retention_days is None else retention_days

    existing_log = trim_log_by_time(log_path, retention_days=retention_days)
    log_content = existing_log + ["\n--- New Run ---\n"] + [line + "\n" for line in log_lines]

    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, "w", encoding="utf-8") as f:
        f.writelines(log_content)
    return log_path
