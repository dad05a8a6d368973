#!/usr/bin/env python3

# swiftbar plugin:
# ln -s ./clock.py ~/SwiftBar/clock.1m.py
#
# i3blocks config:
# [clock]
# command=./clock.py
# interval=60

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/swiftbar_clock_config.yaml"
CONFIG_ENV_VAR = "SWIFTBAR_CLOCK_CONFIG"

CLOCK_ICONS = {
    (12, 0): "\U0001F55B",
    (12, 30): "\U0001F567",
    (1, 0): "\U0001F550",
    (1, 30): "\U0001F55C",
    (2, 0): "\U0001F551",
    (2, 30): "\U0001F55D",
    (3, 0): "\U0001F552",
    (3, 30): "\U0001F55E",
    (4, 0): "\U0001F553",
    (4, 30): "\U0001F55F",
    (5, 0): "\U0001F554",
    (5, 30): "\U0001F560",
    (6, 0): "\U0001F555",
    (6, 30): "\U0001F561",
    (7, 0): "\U0001F556",
    (7, 30): "\U0001F562",
    (8, 0): "\U0001F557",
    (8, 30): "\U0001F563",
    (9, 0): "\U0001F558",
    (9, 30): "\U0001F564",
    (10, 0): "\U0001F559",
    (10, 30): "\U0001F565",
    (11, 0): "\U0001F55A",
    (11, 30): "\U0001F566",
}


class ConfigError(ValueError):
    pass


# Only true/false are booleans, so cities like "No" or "On" stay strings.
class CityLoader(yaml.SafeLoader):
    pass


CityLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
CityLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


@dataclass(frozen=True)
class CityEntry:
    name: str
    timezone: str


DEFAULT_CITIES = (
    CityEntry("New York", "America/New_York"),
    CityEntry("London", "Europe/London"),
    CityEntry("Tokyo", "Asia/Tokyo"),
)


def clock_icon(hour: int, minute: int) -> str:
    """Pick the clock face closest to hour:minute, in half-hour steps."""
    if minute < 15:
        rounded_minute = 0
    elif minute < 45:
        rounded_minute = 30
    else:
        rounded_minute = 0

    if minute >= 45:
        display_hour = (hour + 1) % 12
    else:
        display_hour = hour % 12
    if display_hour == 0:
        display_hour = 12

    return CLOCK_ICONS.get((display_hour, rounded_minute), CLOCK_ICONS[(12, 0)])


def parse_config(text: str) -> tuple[CityEntry, ...]:
    data = yaml.load(text, Loader=CityLoader)
    if not isinstance(data, dict) or not isinstance(data.get("cities"), list):
        raise ConfigError("expected a mapping with a 'cities' list")

    cities = []
    for item in data["cities"]:
        if not isinstance(item, dict):
            raise ConfigError(f"city entry is not a mapping: {item!r}")
        name = item.get("name")
        timezone = item.get("timezone")
        if not isinstance(name, str) or not isinstance(timezone, str):
            raise ConfigError(f"city entry needs string 'name' and 'timezone': {item!r}")
        cities.append(CityEntry(name, timezone))
    return tuple(cities)


def candidate_paths(path: str, home: str | None = None) -> list[str]:
    candidates = [path]
    if path.startswith("~/") and home:
        candidates.append(os.path.join(home, path[2:]))
    return candidates


def load_config(path: str, home: str | None = None) -> tuple[CityEntry, ...]:
    """Return the cities from the first readable config candidate.

    Missing, unreadable and malformed files are skipped; when nothing
    usable is found the built-in DEFAULT_CITIES are returned.
    """
    for candidate in candidate_paths(path, home):
        try:
            with open(candidate, "r", encoding="utf-8") as f:
                return parse_config(f.read())
        except (OSError, UnicodeDecodeError, yaml.YAMLError, ConfigError) as e:
            logger.debug(f"Skipping config {candidate}: {e}")
    logger.debug("No usable config found, using default cities")
    return DEFAULT_CITIES


def render(now: datetime, icon: str, cities) -> str:
    lines = [icon, "---", format_datetime(now)]
    for city in cities:
        try:
            tz = ZoneInfo(city.timezone)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.warning(f"Invalid timezone '{city.timezone}' for {city.name}")
            continue
        city_time = now.astimezone(tz)
        lines.append(f"{city_time.hour:02d}:{city_time.minute:02d} {city.name}")
    return "\n".join(lines) + "\n"


def emit(text: str, stream=None) -> None:
    if stream is None:
        stream = sys.stdout
    stream.write(text)
    stream.flush()


def timezone_listing() -> str:
    return "".join(f"{name}\n" for name in sorted(available_timezones()))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="clock.py",
        description="Display world clocks with unicode clock icons",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH),
        help=f"path to configuration file (env: {CONFIG_ENV_VAR})",
    )
    # https://en.wikipedia.org/wiki/List_of_tz_database_time_zones
    parser.add_argument(
        "-l",
        "--list-timezones",
        action="store_true",
        help="list all available timezones",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log config lookup details")
    return parser.parse_args(argv)


def main(argv=None, stream=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if args.list_timezones:
        output = timezone_listing()
    else:
        cities = load_config(args.config, os.environ.get("HOME"))
        now = datetime.now().astimezone()
        output = render(now, clock_icon(now.hour, now.minute), cities)

    try:
        emit(output, stream)
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
