# -*- coding: utf-8 -*-
# Time       : 2024/10/12 14:20
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from .challenger import ChallengeLoop
from .config import AgentConfig
from .harvester import CaptchaHarvester, get_captcha_token
from .interceptor import TokenInterceptor
from .pointer import PointerActuator
from .session import Session, SessionManager
from .signal import CancellationSignal

__all__ = [
    'AgentConfig',
    'CaptchaHarvester',
    'CancellationSignal',
    'ChallengeLoop',
    'PointerActuator',
    'Session',
    'SessionManager',
    'TokenInterceptor',
    'get_captcha_token',
]
