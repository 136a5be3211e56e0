#!/usr/bin/env python3
"""
msgpass: Message passing algorithm compiler for factor graphs

Setup script for installation.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="msgpass",
    version="1.0.0",
    description="Compile factor graph message schedules into executable message passing algorithms",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["msgpass", "msgpass.*"]),
    py_modules=["main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Topic :: Software Development :: Compilers",
    ],
    python_requires=">=3.9",
    keywords="factor graph, message passing, belief propagation, variational inference, code generation",
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "networkx>=2.6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "msgpass=main:main",
        ],
    },
)
