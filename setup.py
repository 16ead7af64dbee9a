import re
from pathlib import Path

from setuptools import setup, find_packages

here = Path(__file__).parent

my_readme = here.joinpath("README.md").read_text(encoding="utf8")
my_version = re.search(
    r'^__version__ = "([^"]+)"',
    here.joinpath("src", "suno_captcha", "__init__.py").read_text(encoding="utf8"),
    re.M,
).group(1)

# python setup.py sdist bdist_wheel && python -m twine upload dist/*
setup(
    name="suno-captcha",
    version=my_version,
    keywords=["hcaptcha", "suno", "2captcha", "playwright", "captcha-solver"],
    author="QIN2DIM",
    author_email="qinse.top@foxmail.com",
    description="🥂 Harvest the hCaptcha token of the Suno create page with Playwright and 2Captcha.",
    long_description=my_readme,
    long_description_content_type="text/markdown",
    license="GNU General Public License v3.0",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["suno_captcha", "suno_captcha.*"]),
    install_requires=[
        "loguru>=0.7.0",
        "playwright>=1.40.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "tenacity>=8.2.3",
        "httpx",
        "pytz",
    ],
    extras_require={
        "dev": ["nox", "pytest", "pytest-asyncio"],
        "test": ["pytest", "pytest-asyncio"],
    },
    python_requires=">=3.10",
    classifiers=[
        "Topic :: Software Development",
        "Topic :: Software Development :: Libraries",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Programming Language :: Python :: 3",
    ],
)
