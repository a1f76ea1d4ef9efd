#!/usr/bin/env python3
"""Setup script for httptool."""

from setuptools import setup, find_packages

setup(
    name="httptool",
    version="0.1.0",
    description="Shared pooled HTTP client with request logging and slow-request warnings",
    author="httptool Team",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "httpx[http2]>=0.25.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
)
