"""
Setup configuration for PisteBot, the ledger event to settlement message bridge.
"""

import os

from setuptools import setup, find_packages

setup(
    name="pistebot",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",

    entry_points={
        "console_scripts": [
            "pistebot = pistebot.cli:main",
        ],
        # Flake8 plugin entry point
        "flake8.extension": [
            "HEX = flake8_hexagonal:HexagonalArchitectureChecker",
        ],
    },

    # Plugin module
    py_modules=["flake8_hexagonal"],

    install_requires=[
        "pydantic>=2.0.0",
        "aiohttp>=3.9.0",
        "python-dotenv>=1.0.0",
        "click>=8.1.0",
        "rich>=13.0.0",
    ],

    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "hypothesis>=6.0.0",
        ],
        "dev": [
            "pytest-cov>=4.0.0",
            "flake8>=6.0.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
        ],
    },

    author="PisteBot Team",
    description="Ledger event bridge producing Telegram notifications and MT202 settlement files",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
)
