#!/usr/bin/env python3
"""
Build configuration for pollhttp.

pollhttp is pure Python; the native work happens inside its transport
libraries:
1. pycurl (libcurl multi interface) for the multiplexed transport
2. urllib3 for the threaded transport
3. aiohttp for the host-managed asyncio transport
"""

import re
from pathlib import Path

from setuptools import find_packages, setup

SRC_DIR = Path("src")
PACKAGE_DIR = SRC_DIR / "pollhttp"


def read_version():
    """Read __version__ from the package without importing it"""
    text = (PACKAGE_DIR / "__init__.py").read_text(encoding="utf-8")
    match = re.search(r'^__version__ = "([^"]+)"', text, re.MULTILINE)
    if not match:
        raise RuntimeError("Unable to find __version__ in src/pollhttp/__init__.py")
    return match.group(1)


INSTALL_REQUIRES = [
    "pycurl>=7.45",
    "urllib3>=2.0",
    "aiohttp>=3.9",
]

EXTRAS_REQUIRE = {
    "test": [
        "pytest>=7.0",
        "python-dotenv>=1.0",
    ],
}

if __name__ == "__main__":
    setup(
        name="pollhttp",
        version=read_version(),
        description="Non-blocking HTTP requests for frame loops, polled once per tick",
        long_description=__doc__,
        license="MIT",
        python_requires=">=3.9",
        package_dir={"": str(SRC_DIR)},
        packages=find_packages(where=str(SRC_DIR)),
        install_requires=INSTALL_REQUIRES,
        extras_require=EXTRAS_REQUIRE,
        classifiers=[
            "Programming Language :: Python :: 3",
            "License :: OSI Approved :: MIT License",
            "Topic :: Internet :: WWW/HTTP",
        ],
    )
