# catalog_sync/utils/logger.py
import sys, time

from .. import config

LEVELS = {"ERROR": 40, "WARN": 30, "INFO": 20, "DEBUG": 10, "NONE": 100}

def _threshold() -> int:
    return LEVELS.get((config.LOG_LEVEL or "INFO").upper(), 20)

def _ts():
    return time.strftime("%H:%M:%S")

def log(level: str, msg: str):
    if LEVELS[level] >= _threshold():
        print(f"[{_ts()}][{level}] {msg}", file=sys.stdout if LEVELS[level] < 40 else sys.stderr)

def debug(msg): log("DEBUG", msg)
def info(msg):  log("INFO", msg)
def warn(msg):  log("WARN", msg)
def error(msg): log("ERROR", msg)
