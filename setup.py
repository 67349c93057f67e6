"""setuptools setup for PomPom.

Install for development:
    pip install -e ".[test]"
    pompom
"""

from setuptools import find_packages, setup

setup(
    name="pompom",
    version="0.1.0",
    description="Terminal Pomodoro timer",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "numpy>=1.24",
        "rich>=13.0",
        "pyfiglet>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "pompom = pompom.__main__:main",
        ],
    },
)
