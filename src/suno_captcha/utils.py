# -*- coding: utf-8 -*-
# Time       : 2024/10/12 15:02
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

import os
import sys
from uuid import uuid4

import pytz
from loguru import logger


def init_log(timezone: str = "UTC", **sink_channel):
    """
    Initialize the log configuration

    Parameter:
        timezone: The timezone the log timestamps are rendered in
        sink_channel: A dictionary containing different log output channels
        - error: The path to the error log file
        - runtime: The path to the runtime log file
        - serialize: serialize the log file path
    """
    log_level = os.getenv("LOG_LEVEL", "DEBUG").upper()

    tz = pytz.timezone(timezone)

    def _localize(record) -> bool:
        record["time"] = record["time"].astimezone(tz)
        return True

    persistent_format = (
        "<g>{time:YYYY-MM-DD HH:mm:ss}</g> | "
        "<lvl>{level}</lvl>    | "
        "<c><u>{name}</u></c>:{function}:{line} | "
        "{message} - "
        "{extra}"
    )

    stdout_format = (
        "<g>{time:YYYY-MM-DD HH:mm:ss}</g> | "
        "<lvl>{level:<8}</lvl>    | "
        "<c>{name}</c>:<c>{function}</c>:<c>{line}</c> | "
        "<n>{message}</n>"
    )

    logger.remove()

    logger.add(
        sink=sys.stdout,
        colorize=True,
        level=log_level,
        format=stdout_format,
        diagnose=False,
        filter=_localize,
    )

    if sink_channel.get("error"):
        logger.add(
            sink=sink_channel.get("error"),
            level="ERROR",
            rotation="5 MB",
            retention="7 days",
            encoding="utf8",
            diagnose=False,
            filter=_localize,
        )

    if sink_channel.get("runtime"):
        logger.add(
            sink=sink_channel.get("runtime"),
            level="TRACE",
            rotation="5 MB",
            retention="7 days",
            encoding="utf8",
            diagnose=False,
            filter=_localize,
        )

    if sink_channel.get("serialize"):
        logger.add(
            sink=sink_channel.get("serialize"),
            level="DEBUG",
            format=persistent_format,
            encoding="utf8",
            diagnose=False,
            serialize=True,
            filter=_localize,
        )

    return logger


def run_logger(run_id: str | None = None):
    """Logger bound to a single orchestration run, every record carries its run_id."""
    return logger.bind(run_id=run_id or uuid4().hex[:8])
