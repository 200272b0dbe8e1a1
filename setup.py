"""Setup script for cmbridge."""

from setuptools import find_namespace_packages, setup

setup(
    name="cmbridge",
    version="0.1.0",
    description="Client-side integration layer for the Unity Version Control (cm) executable",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["cmbridge", "cmbridge.*"]),
    install_requires=[
        "click>=8.1",
        "dependency-injector>=4.41",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        'tomli>=2.0; python_version<"3.11"',
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": [
            "cmbridge=cmbridge.__main__:main",
        ],
    },
)
