#!/usr/bin/env python3

from setuptools import find_packages, setup

setup(
    name="pagechat",
    version="0.1",
    description="Webpage-aware chat completions",
    python_requires=">=3.12",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"pagechat": ["default-config/*.toml"]},
    install_requires=[
        "aiohttp",
        "beautifulsoup4",
        "loguru",
        "lxml",
        "wcwidth",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "pagechat=pagechat.pagechat:main",
        ],
    },
)
