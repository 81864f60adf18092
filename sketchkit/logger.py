"""Structured JSON logging on top of :mod:`sketchkit.jsonbuilder`."""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum
from typing import Any

from .jsonbuilder import JsonBuildError, build_json

LEVEL_NAMES = ("TRACE", "DEBUG", "INFO", "WARN", "ERROR", "FATAL")

Sender = Callable[[int, str], None]


class Level(IntEnum):
    """Log levels; a higher value is more severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


class Logger:
    """Builds one JSON line per call and hands it to every registered sender.

    Each line starts with the optional time and id members and the level,
    followed by the items given to :meth:`log` in the form accepted by
    :func:`~sketchkit.jsonbuilder.build_json`.
    """

    def __init__(
        self,
        min_level: int = Level.DEBUG,
        max_len: int = 512,
        time_key: str | None = None,
        get_time: Callable[[], str] | None = None,
        id_key: str | None = None,
        get_id: Callable[[], str] | None = None,
        level_key: str = "l",
    ) -> None:
        if (time_key is None) != (get_time is None):
            raise ValueError("time_key and get_time must be given together")
        if (id_key is None) != (get_id is None):
            raise ValueError("id_key and get_id must be given together")
        self.min_level = min_level
        self.max_len = max_len
        self.time_key = time_key
        self.get_time = get_time
        self.id_key = id_key
        self.get_id = get_id
        self.level_key = level_key
        self._senders: list[Sender] = []

    def add_sender(self, sender: Sender) -> None:
        """Register a callable taking ``(level, json_text)``."""
        self._senders.append(sender)

    def _header(self, level: int) -> str:
        items: list[Any] = ["-{"]
        if self.time_key is not None and self.get_time is not None:
            items += [self.time_key, self.get_time()]
        if self.id_key is not None and self.get_id is not None:
            items += [self.id_key, self.get_id()]
        items += ["i|" + self.level_key, level]
        return build_json(*items, buf_size=64)

    def log(self, level: int, *args: Any) -> None:
        """Log ``args`` at ``level`` unless it is below the minimum level."""
        if level < self.min_level:
            return
        try:
            text = build_json(self._header(level), *args, buf_size=self.max_len)
        except JsonBuildError as exc:
            level = Level.ERROR
            text = build_json("i|len", exc.code, "build_json() failed in log()")
        for sender in self._senders:
            sender(level, text)

    def fatal(self, *args: Any) -> None:
        self.log(Level.FATAL, *args)

    def error(self, *args: Any) -> None:
        self.log(Level.ERROR, *args)

    def warn(self, *args: Any) -> None:
        self.log(Level.WARN, *args)

    def info(self, *args: Any) -> None:
        self.log(Level.INFO, *args)

    def debug(self, *args: Any) -> None:
        self.log(Level.DEBUG, *args)

    def trace(self, *args: Any) -> None:
        self.log(Level.TRACE, *args)


def modify_for_human(
    level: int,
    text: str,
    time_key: str | None = None,
    id_key: str | None = None,
    log_id: str | None = None,
    level_key: str = "l",
) -> str:
    """Turn a logged JSON line into a shorter line for reading on a console."""
    if time_key is not None:
        text = text.replace(f'"{time_key}":"', "")
    if id_key is not None:
        if time_key is not None:
            text = text.replace(f'","{id_key}":', "")
        else:
            text = text.replace(f'"{id_key}":', "")
        if log_id is not None:
            text = text.replace(f'"{log_id}', "")
    if 0 <= level < len(LEVEL_NAMES):
        if time_key is not None or id_key is not None:
            marker = f',"{level_key}":{level},'
        else:
            marker = f'"{level_key}":{level},'
        text = text.replace(marker, LEVEL_NAMES[level])
    text = text.replace('\\"', "'")
    return text.replace('"', " ")