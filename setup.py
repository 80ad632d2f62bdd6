from setuptools import find_packages, setup

setup(
    name="dirwatch",
    version="0.1.0",
    description="Watch a directory and report every change as a timestamped event",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click",
        "toml",
        "pyyaml",
        "rich",
        "watchdog",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "dirwatch=dirwatch.cli:main"
        ]
    },
)
