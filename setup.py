from setuptools import setup, find_packages

setup(
    name="timestamp-audio-splitter",
    version="0.1.0",
    description="Split an audio file into named segments from text timestamps",
    author="Valerio Galano",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pydub>=0.25.1",
        "numpy>=1.24.0",
        "pyyaml>=6.0",
        "audioop-lts>=0.2.1; python_version>='3.13'",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "timestamp-splitter=timestamp_splitter.cli:main",
        ],
    },
)
