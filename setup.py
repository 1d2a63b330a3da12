"""Setup script for the maui_instruments package."""
from pathlib import Path

from setuptools import find_namespace_packages, setup

project_dir = Path(__file__).parent

requirements = [
    line.strip()
    for line in (project_dir / "requirements.txt").read_text(encoding="utf-8").splitlines()
    if line.strip() and not line.startswith("#")
]

setup(
    name="maui_instruments",
    version="1.0.0",
    description="PyVISA driver for Teledyne LeCroy MAUI oscilloscopes",
    packages=find_namespace_packages(include=["maui_instruments", "maui_instruments.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest"],
        "py": ["pyvisa-py"],
    },
    python_requires=">=3.8",
    classifiers=[
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering",
    ],
    entry_points={
        "console_scripts": [
            "maui-repl=maui_instruments.repl:main",
        ],
    },
)
