"""
Setup script for the Newman Test Results Summarizer

Installs the ``newman_summary`` package and the ``newman-summary`` command.
"""

from setuptools import find_packages, setup

setup(
    name="newman-summary",
    version="0.1.0",
    description="Summarize Newman HTML/JSON run reports into one self-contained HTML document",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"newman_summary.reporter": ["templates/*.j2"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "typer>=0.9",
        "rich>=13.0",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "beautifulsoup4>=4.12",
        "jinja2>=3.1",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "newman-summary=newman_summary.cli:main",
        ],
    },
)
