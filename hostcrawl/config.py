import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

loaded = load_dotenv()
if not loaded and Path(".env").exists():
	raise RuntimeError(".env file present but failed to load")


def get_str_env(name: str, default: str) -> str:
	raw = os.getenv(name)
	if raw is None or raw.strip() == "":
		return default
	return raw


def get_int_env(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return int(raw)
	except ValueError:
		logging.exception("Invalid %s: %r", name, raw)
		return default


def get_optional_int_env(name: str) -> Optional[int]:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return None
	try:
		return int(raw)
	except ValueError:
		logging.exception("Invalid %s: %r", name, raw)
		return None


def user_agent() -> str:
	return get_str_env("HOSTCRAWL_USER_AGENT", "hostcrawl/1.0")


def default_concurrency() -> int:
	return get_int_env("HOSTCRAWL_CONCURRENCY", 8)


def default_timeout_ms() -> int:
	return get_int_env("HOSTCRAWL_TIMEOUT_MS", 10_000)


def default_crawl_delay_ms() -> int:
	return get_int_env("HOSTCRAWL_CRAWL_DELAY_MS", 0)


def log_level() -> str:
	return (get_str_env("HOSTCRAWL_LOG_LEVEL", "WARNING")).strip().upper()
