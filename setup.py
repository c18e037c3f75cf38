"""Setup file for editable install compatibility."""
from setuptools import setup, find_packages

setup(
    name="markowitz-engine",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.20",
        "pandas>=1.3",
        "openpyxl>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "scipy>=1.7",
        ],
    },
    entry_points={
        "console_scripts": [
            "mk-optimize=markowitz_engine.cli.main:main",
        ],
    },
    python_requires=">=3.8",
)
