# -*- coding: utf-8 -*-
# Time       : 2024/10/12 14:00
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

from suno_captcha.agent import AgentConfig, CaptchaHarvester, get_captcha_token
from suno_captcha.models import CaptchaResult, ChallengeKind, Identity
from suno_captcha.utils import init_log

__version__ = "0.1.0"

__all__ = [
    "AgentConfig",
    "CaptchaHarvester",
    "CaptchaResult",
    "ChallengeKind",
    "Identity",
    "get_captcha_token",
    "init_log",
]
