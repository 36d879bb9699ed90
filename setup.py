#!/usr/bin/env python3
"""
Setup script for zfs-telemetry.
This installs the telemetry agent and its zfs-telemetry console script.
"""

from setuptools import setup, find_packages

setup(
    name="zfs-telemetry",
    version="0.1.0",
    description="ZFS pool, dataset, scan and host service telemetry agent",
    python_requires=">=3.9",
    packages=find_packages(include=["zfs_telemetry", "zfs_telemetry.*"]),
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "fastapi>=0.100",
        "uvicorn>=0.23",
        "prometheus-client>=0.17",
        "typing-extensions>=4.6",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "zfs-telemetry=zfs_telemetry.__main__:main",
        ],
    },
)
