#!/usr/bin/env python3
"""
Setup configuration for the Export Compression Pipeline.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the contents of README file
this_directory = Path(__file__).parent
readme = this_directory / "README.md"
long_description = readme.read_text(encoding="utf-8") if readme.exists() else ""

# Read requirements from requirements.txt
requirements = []
if (this_directory / "requirements.txt").exists():
    requirements = (this_directory / "requirements.txt").read_text().strip().split('\n')
    requirements = [req.strip() for req in requirements if req.strip() and not req.startswith('#')]

setup(
    name="export-compression-pipeline",
    version="1.0.0",
    author="Project Think",
    author_email="",
    description="Concurrent gzip compression stage for tabular data exports",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['pipeline', 'pipeline.*']),
    py_modules=[
        'base_classes',
        'compress',
        'export_compression_pipeline',
        'pipeline_configs',
        'pipeline_monitoring',
        'resilience_patterns',
        'secure_utils',
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: System :: Archiving :: Compression",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov",
            "pytest-asyncio",
            "pytest-mock",
            "black",
            "flake8",
            "mypy",
        ],
        "test": [
            "pytest>=7.0",
            "pytest-cov",
            "pytest-asyncio",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "compress-exports=compress:main",
        ],
    },
    keywords=[
        "gzip",
        "csv",
        "compression",
        "data-export",
        "batch-processing",
    ],
)
