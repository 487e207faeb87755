# setup.py - Build and install chunknet
from setuptools import setup, find_packages

setup(
    name="chunknet",
    version="0.1.0",
    description="Discrimination network for incremental chunk learning",
    packages=find_packages(include=["chunknet", "chunknet.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
