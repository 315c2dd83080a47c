#!/usr/bin/env python3
"""
Setup configuration for tunequiz
Quiz content generation for a music-guessing game, built on YouTube playlists
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "requests>=2.31.0",
    "click>=8.1.7",
    "rich-click>=1.7.0",
    "pyyaml>=6.0.1",
    "python-dotenv>=1.0.0",
    "tqdm>=4.66.1",
]

setup(
    name="tunequiz",
    version="0.1.0",
    author="tunequiz Team",
    description="Build fair, cached music-guessing quizzes from YouTube playlists",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["tunequiz", "tunequiz.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Games/Entertainment",
        "Topic :: Multimedia :: Sound/Audio",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
        ],
    },
    entry_points={
        "console_scripts": [
            "tunequiz=tunequiz.cli:main",
        ],
    },
    include_package_data=True,
    package_data={
        "tunequiz": ["data/*.yaml"],
    },
    keywords="music quiz youtube playlist kpop jpop game",
)
