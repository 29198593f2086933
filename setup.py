"""
Setup script for netquiz.

netquiz is the adaptive practice engine behind a networking certification
self-study quiz. It serves three roles:

1. Mastery tracking - per-question attempt history and mastery levels
2. Session planning - seven practice modes, from weak-area drills to exams
3. Access control - free/pro tiers with a monthly question quota

The 'netquiz' command is a thin terminal front end over the engine.
"""

from setuptools import find_packages, setup

setup(
    name="netquiz",
    version="1.0.0",
    description="Adaptive practice engine for networking certification study",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="netquiz contributors",
    packages=find_packages(include=["netquiz", "netquiz.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
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
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "netquiz=netquiz.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz mastery practice networking certification education",
)
