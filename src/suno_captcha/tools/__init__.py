from .solution_requester import SolutionRequester
from .twocaptcha import TwoCaptchaClient

__all__ = ["SolutionRequester", "TwoCaptchaClient"]
