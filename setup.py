"""
Setup script for cbind

Installs the ``cbind`` package and its ``cbind`` console script. The C
parser is libclang, pulled in through the ``libclang`` wheel, which ships
the shared library.
"""

import sys
from pathlib import Path
from setuptools import setup, find_packages


# Read version from cbind/__init__.py
def get_version():
    version_file = Path("cbind/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


if sys.version_info < (3, 9):
    sys.exit("cbind requires Python 3.9 or newer")


setup(
    name="cbind",
    version=get_version(),
    description="C declaration lowering for binding generators",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["cbind", "cbind.*"]),
    python_requires=">=3.9",
    install_requires=[
        "libclang>=16.0",
        "tomli>=1.1; python_version<'3.11'",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "cbind=cbind.cli:main",
        ],
    },
    zip_safe=False,
)
