"""
Setup script for pacing-engine.

The pacing engine is the adaptive core shared by every activity in the
early-learning game. It decides:

1. How much help a prompt gets, and when (hint ladder)
2. Which missed concepts to re-drill (concept tracker)
3. When reward and stage thresholds fire (threshold meters)
4. Whether a new play session may start (session gate)

The 'pacing' command gives caregivers a view of the session gate and
a headless simulation of a play session.
"""

from setuptools import find_packages, setup

setup(
    name="pacing-engine",
    version="1.0.0",
    description="Adaptive pacing and progression engine for early-learning games",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pacing=pacing.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Games/Entertainment",
    ],
    keywords="education adaptive-learning spaced-repetition hints children",
)
