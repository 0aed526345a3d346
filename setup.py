#!/usr/bin/env python3
"""
Build configuration for serverbench.

This setup.py configures:
1. The pure-Python serverbench package from the src/ layout
2. Runtime dependencies (filelock for cache locking, python-dotenv for .env config)
3. The ``serverbench`` console script
"""

from pathlib import Path

from setuptools import find_packages, setup

SRC_DIR = Path("src")

# Read version from the package without importing it
VERSION = "0.0.0"
for line in (SRC_DIR / "serverbench" / "__init__.py").read_text().splitlines():
    if line.startswith("__version__"):
        VERSION = line.split("=")[1].strip().strip("\"'")
        break

if __name__ == "__main__":
    setup(
        name="serverbench",
        version=VERSION,
        description="Compare HTTP server benchmark runs driven by rewrk",
        license="MIT",
        python_requires=">=3.8",
        package_dir={"": str(SRC_DIR)},
        packages=find_packages(where=str(SRC_DIR)),
        install_requires=[
            "filelock>=3.0",
            "python-dotenv>=0.19",
        ],
        extras_require={
            "test": ["pytest>=7.0"],
        },
        entry_points={
            "console_scripts": [
                "serverbench=serverbench.__main__:main",
            ],
        },
    )
