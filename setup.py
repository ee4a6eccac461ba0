from setuptools import setup, find_packages

# Import version from the package
from subjectalias.version import __version__

setup(
    name="subjectalias",
    version=__version__,
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"subjectalias": ["tables/*.aliases"]},
    install_requires=[
        "lark>=1.1.5",
        "typer>=0.9.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "subjectalias=subjectalias.main:app",
        ],
    },
    python_requires=">=3.10",
)
