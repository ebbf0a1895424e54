"""
Setup script for flowspace-insight: semantic graph analysis and validation for collaborative whiteboards
"""

from setuptools import setup, find_packages

setup(
    name="flowspace-insight",
    version="1.0.0",
    description="Semantic graph analysis and validation engine for collaborative whiteboards",
    long_description="Rule-based analysis of whiteboard snapshots: spatial clusters, topics, hierarchies, cycles, duplicates, structural diagnostics and ranked remediation patches",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src", exclude=["tests*", "docs*", "examples*"]),
    python_requires=">=3.9",
    install_requires=[
        # Models and configuration
        "pydantic>=2.11.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",

        # Numerics and graphs
        "numpy>=1.24.0",
        "networkx>=3.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "flowspace=flowspace.cli:main",
        ],
    },
    include_package_data=True,
    author="Flowspace Team",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="whiteboard flowchart graph-analysis diagram-validation",
)
